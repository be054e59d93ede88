# meydan/api/context.py
from flask import current_app, jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity

from meydan.core.context import FeedContext, Viewer


def current_context() -> FeedContext:
    """jwt_required 가 적용된 라우트에서 현재 사용자의 FeedContext 를 가져옵니다."""
    viewer = Viewer(user_id=get_jwt_identity(), email=get_jwt().get('email'))
    return current_app.services['sessions'].get_or_open(viewer)


def setup_required_response():
    return jsonify({
        "error_code": "SETUP_REQUIRED",
        "message": "백엔드 컬렉션이 준비되지 않았습니다. 설정 안내를 따라주세요.",
        "setup_guide": "/api/feed/setup",
    }), 503
