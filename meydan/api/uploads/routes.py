# meydan/api/uploads/routes.py

import logging
from flask import request, jsonify, Blueprint, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import Schema, fields, validate, ValidationError

uploads_bp = Blueprint('uploads', __name__)


class UploadUrlSchema(Schema):
    """업로드 URL 발급 요청 스키마"""
    filename = fields.Str(required=True, validate=validate.Length(min=1))
    content_type = fields.Str(required=True, validate=validate.Regexp(r'^(image|video)/', error="이미지 또는 동영상만 업로드할 수 있습니다."))


@uploads_bp.route('/url', methods=['POST'])
@jwt_required()
def get_upload_url():
    """
    미디어 버킷에 직접 업로드할 수 있는 Pre-signed URL을 발급합니다.
    응답의 public_url 과 media_type 을 게시물 작성 요청의 media 로 그대로 사용합니다.
    """
    user_id = get_jwt_identity()
    storage_service = current_app.services['storage']

    try:
        data = UploadUrlSchema().load(request.get_json())
        url_info = storage_service.generate_upload_url(user_id, data['filename'], data['content_type'])
        return jsonify(url_info), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"Pre-signed URL 생성 중 서버 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "URL_GENERATION_FAILED", "message": "URL 생성 중 서버 오류가 발생했습니다."}), 500
