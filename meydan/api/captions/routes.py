# meydan/api/captions/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app, Response
from marshmallow import ValidationError

from meydan.api.captions.schemas import CaptionRequestSchema

caption_proxy_bp = Blueprint('caption_proxy_bp', __name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
    'Access-Control-Allow-Methods': 'POST, OPTIONS',
}


@caption_proxy_bp.after_request
def add_cors_headers(response):
    """브라우저에서 직접 호출할 수 있도록 모든 응답에 CORS 헤더를 붙입니다."""
    response.headers.update(CORS_HEADERS)
    return response


@caption_proxy_bp.route('', methods=['POST', 'OPTIONS'])
def generate_caption():
    """
    캡션 생성 프록시. 생성형 API 키는 이 서버에만 있습니다.
    성공: {caption}, 실패: {error}. 사전 요청(OPTIONS)에는 빈 200으로 답합니다.
    """
    if request.method == 'OPTIONS':
        return Response('ok', status=200)

    openai_service = current_app.services['openai']
    try:
        data = CaptionRequestSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error": str(err.messages)}), 400

    try:
        if data['type'] == 'text':
            caption = openai_service.generate_caption_from_text(data['prompt'])
        else:
            image = data['image']
            caption = openai_service.generate_caption_from_image(image['data'], image['mime_type'], data.get('prompt'))
        return jsonify({"caption": caption}), 200
    except Exception as e:
        logging.error(f"캡션 프록시 처리 실패: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500
