# meydan/services/caption_client.py
import base64
import logging
from typing import Optional

import requests
from flask import Flask

TEXT_FALLBACK_CAPTION = "지금은 캡션을 떠올리지 못했어요. 잠시 후 다시 시도해 주세요."
IMAGE_FALLBACK_CAPTION = "지금은 이 사진에 어울리는 캡션을 떠올리지 못했어요. 잠시 후 다시 시도해 주세요."


class CaptionClient:
    """
    캡션 프록시 엔드포인트를 호출하는 클라이언트.
    어떤 실패든 사용자에게는 고정된 대체 문구만 돌려주고, 상세 원인은 로그로만 남깁니다.
    재시도와 타임아웃은 없습니다.
    """

    def __init__(self, endpoint_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.endpoint_url = endpoint_url
        self.session = session or requests.Session()

    def init_app(self, app: Flask):
        self.endpoint_url = app.config.get('CAPTION_PROXY_URL')

    def generate_from_text(self, prompt: str) -> str:
        return self._request({"type": "text", "prompt": prompt}, TEXT_FALLBACK_CAPTION)

    def generate_from_image(self, image_bytes: bytes, mime_type: str, prompt: Optional[str] = None) -> str:
        payload = {
            "type": "image",
            "prompt": prompt,
            "image": {
                "data": base64.b64encode(image_bytes).decode('ascii'),
                "mimeType": mime_type,
            },
        }
        return self._request(payload, IMAGE_FALLBACK_CAPTION)

    def _request(self, payload: dict, fallback: str) -> str:
        if not self.endpoint_url:
            logging.error("CAPTION_PROXY_URL이 설정되지 않았습니다.")
            return fallback

        try:
            response = self.session.post(self.endpoint_url, json=payload)
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            logging.error(f"캡션 프록시 호출 실패 ({payload['type']}): {e}")
            return fallback

        if not response.ok or not isinstance(body, dict) or body.get('error'):
            detail = body.get('error') if isinstance(body, dict) else body
            logging.error(f"캡션 프록시 오류 응답 (status: {response.status_code}): {detail}")
            return fallback

        caption = body.get('caption')
        if not isinstance(caption, str) or not caption.strip():
            logging.error(f"캡션 프록시 응답에 caption 필드가 없습니다: {body}")
            return fallback
        return caption.strip()
