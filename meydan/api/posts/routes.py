# meydan/api/posts/routes.py
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required
from marshmallow import ValidationError

from meydan.api.context import current_context, setup_required_response
from meydan.api.posts.schemas import (
    PostCreateSchema, PostUpdateSchema, CommentCreateSchema,
    PostCreatedSchema, CommentResponseSchema
)
from meydan.core.errors import MutationError

posts_bp = Blueprint('posts_bp', __name__)


def _ready_context():
    context = current_context()
    if context.setup_required:
        return context, setup_required_response()
    return context, None


@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    """
    새 게시물을 작성합니다. 미디어는 /api/uploads/url 로 미리 업로드한 URL을 사용합니다.
    실패 시 백엔드 오류 원문을 그대로 반환합니다.
    """
    post_service = current_app.services['posts']
    context, blocked = _ready_context()
    if blocked:
        return blocked
    try:
        data = PostCreateSchema().load(request.get_json())
        post = post_service.create_post(context, data['content'], data['media'])
        return jsonify(PostCreatedSchema().dump(post)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_POST", "message": str(e)}), 400
    except MutationError as e:
        return jsonify({"error_code": "POST_CREATION_FAILED", "message": e.message}), 502


@posts_bp.route('/<string:post_id>', methods=['PATCH'])
@jwt_required()
def update_post(post_id: str):
    """본인 게시물의 내용을 수정합니다. 내용이 같으면 아무것도 바꾸지 않습니다."""
    post_service = current_app.services['posts']
    context, blocked = _ready_context()
    if blocked:
        return blocked
    try:
        data = PostUpdateSchema().load(request.get_json())
        updated = post_service.update_post(context, post_id, data['content'])
        return jsonify({"updated": updated}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except ValueError as e:
        return jsonify({"error_code": "INVALID_POST", "message": str(e)}), 400
    except MutationError as e:
        return jsonify({"error_code": "POST_UPDATE_FAILED", "message": e.message}), 502


@posts_bp.route('/<string:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id: str):
    """본인 게시물을 삭제합니다. 실패하면 피드는 삭제 전 상태로 돌아갑니다."""
    post_service = current_app.services['posts']
    context, blocked = _ready_context()
    if blocked:
        return blocked
    try:
        post_service.delete_post(context, post_id)
        return Response(status=204)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except LookupError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except MutationError as e:
        return jsonify({"error_code": "POST_DELETION_FAILED", "message": e.message}), 502


@posts_bp.route('/<string:post_id>/like', methods=['POST'])
@jwt_required()
def toggle_like(post_id: str):
    """좋아요를 누르거나 취소합니다."""
    post_service = current_app.services['posts']
    context, blocked = _ready_context()
    if blocked:
        return blocked
    try:
        is_liked = post_service.toggle_like(context, post_id)
        post = context.find_post(post_id)
        return jsonify({"is_liked": is_liked, "likes": post.likes if post else None}), 200
    except LookupError as e:
        return jsonify({"error_code": "POST_NOT_FOUND", "message": str(e)}), 404
    except MutationError as e:
        return jsonify({"error_code": "LIKE_TOGGLE_FAILED", "message": e.message}), 502


@posts_bp.route('/<string:post_id>/comments', methods=['POST'])
@jwt_required()
def add_comment(post_id: str):
    """댓글을 작성합니다. 피드에는 다음 집계 때 나타납니다."""
    post_service = current_app.services['posts']
    context, blocked = _ready_context()
    if blocked:
        return blocked
    try:
        data = CommentCreateSchema().load(request.get_json())
        comment = post_service.add_comment(context, post_id, data['text'])
        return jsonify(CommentResponseSchema().dump(comment)), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_COMMENT", "message": str(e)}), 400
    except MutationError as e:
        return jsonify({"error_code": "COMMENT_CREATION_FAILED", "message": e.message}), 502


@posts_bp.route('/caption', methods=['POST'])
@jwt_required()
def generate_caption():
    """
    작성 중인 게시물의 AI 캡션을 만듭니다.
    - multipart 'image' 파일이 이미지면 이미지 모드, 아니면 'content' 텍스트 모드
    - 어떤 실패든 고정된 대체 문구가 캡션으로 돌아옵니다.
    """
    caption_client = current_app.services['captions']
    payload = request.form if request.files or request.form else (request.get_json(silent=True) or {})
    content = (payload.get('content') or "").strip()
    image = request.files.get('image')

    if image and (image.mimetype or "").startswith('image'):
        caption = caption_client.generate_from_image(image.read(), image.mimetype, content or None)
        return jsonify({"caption": caption, "mode": "image"}), 200

    if not content:
        return jsonify({"error_code": "EMPTY_PROMPT", "message": "먼저 글을 쓰거나 이미지를 추가해 주세요."}), 400

    caption = caption_client.generate_from_text(content)
    return jsonify({"caption": caption, "mode": "text"}), 200
