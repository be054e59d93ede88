# meydan/api/users/routes.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from meydan.api.context import current_context, setup_required_response
from meydan.api.feed.schemas import FeedPostSchema
from meydan.api.users.schemas import ProfileSchema, ProfileUpdateSchema
from meydan.core.errors import MutationError

users_bp = Blueprint('users_bp', __name__)


@users_bp.route('/me', methods=['GET'])
@jwt_required()
def get_my_profile():
    """내 프로필과 내가 쓴 게시물, 좋아요한 게시물을 반환합니다."""
    context = current_context()
    if context.setup_required:
        return setup_required_response()
    post_schema = FeedPostSchema(many=True)
    return jsonify({
        "profile": ProfileSchema().dump(context.profile) if context.profile else None,
        "posts": post_schema.dump(context.posts_by(context.viewer.user_id)),
        "liked_posts": post_schema.dump(context.liked_posts()),
    }), 200


@users_bp.route('/me', methods=['PATCH'])
@jwt_required()
def update_my_profile():
    """내 이름이나 아바타 URL을 수정합니다."""
    user_service = current_app.services['users']
    context = current_context()
    try:
        changes = ProfileUpdateSchema().load(request.get_json())
        user_service.update_profile(context, changes)
        return jsonify({"message": "프로필이 수정되었습니다."}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except MutationError as e:
        return jsonify({"error_code": "PROFILE_UPDATE_FAILED", "message": e.message}), 502
