# meydan/api/feed/routes.py
import logging
from flask import Blueprint, jsonify, current_app, Response
from flask_jwt_extended import jwt_required

from meydan.api.context import current_context, setup_required_response
from meydan.api.feed.schemas import FeedResponseSchema
from meydan.core.setup_guide import setup_guide

feed_bp = Blueprint('feed_bp', __name__)


def _feed_response(context):
    if context.setup_required:
        return setup_required_response()
    with context.lock:
        payload = FeedResponseSchema().dump({
            "viewer": context.profile,
            "posts": context.posts,
            "error": context.error,
        })
    return jsonify(payload), 200


@feed_bp.route('', methods=['GET'])
@jwt_required()
def get_feed():
    """현재 사용자의 집계된 피드를 반환합니다."""
    return _feed_response(current_context())


@feed_bp.route('/refresh', methods=['POST'])
@jwt_required()
def refresh_feed():
    """피드를 백엔드 기준으로 다시 집계합니다."""
    feed_service = current_app.services['feed']
    context = current_context()
    feed_service.refresh(context)
    return _feed_response(context)


@feed_bp.route('/error', methods=['DELETE'])
@jwt_required()
def dismiss_error():
    """오류 배너를 닫습니다."""
    current_context().dismiss_error()
    return Response(status=204)


@feed_bp.route('/setup', methods=['GET'])
def get_setup_guide():
    """백엔드 설정 안내 문서를 반환합니다."""
    return jsonify(setup_guide()), 200


@feed_bp.route('/setup/complete', methods=['POST'])
@jwt_required()
def complete_setup():
    """설정을 마쳤다고 알리면 설정 안내 상태를 벗어나 피드를 다시 불러옵니다."""
    feed_service = current_app.services['feed']
    context = current_context()
    context.leave_setup()
    feed_service.refresh(context)
    logging.info(f"설정 완료 후 피드 재조회 (user_id: {context.viewer.user_id}, status: {context.status.value})")
    return _feed_response(context)
