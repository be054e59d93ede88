# meydan/api/posts/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError, post_load

from meydan.models.post import Media, MediaType


class MediaInputSchema(Schema):
    """미리 업로드된 미디어 참조."""
    url = fields.URL(required=True)
    type = fields.Str(required=True, validate=validate.OneOf([t.value for t in MediaType]))

    @post_load
    def make_media(self, data, **kwargs):
        return Media(url=data['url'], type=MediaType(data['type']))


class PostCreateSchema(Schema):
    """POST /api/posts 요청 본문. 내용과 미디어 중 하나는 있어야 합니다."""
    content = fields.Str(load_default="", validate=validate.Length(max=2000))
    media = fields.Nested(MediaInputSchema, load_default=None, allow_none=True)

    @validates_schema
    def validate_content_or_media(self, data, **kwargs):
        if not (data.get('content') or "").strip() and not data.get('media'):
            raise ValidationError("게시물에는 내용이나 미디어가 필요합니다.")


class PostUpdateSchema(Schema):
    """PATCH /api/posts/{post_id} 요청 본문."""
    content = fields.Str(required=True, validate=validate.Length(max=2000))


class CommentCreateSchema(Schema):
    """POST /api/posts/{post_id}/comments 요청 본문."""
    text = fields.Str(required=True, validate=validate.Length(min=1, max=1000, error="댓글은 1~1000자 사이여야 합니다."))


class PostCreatedSchema(Schema):
    id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    content = fields.Str(required=True)
    media_url = fields.Function(lambda post: post.media.url if post.media else None)
    media_type = fields.Function(lambda post: post.media.type.value if post.media else None)
    created_at = fields.DateTime(required=True)


class CommentResponseSchema(Schema):
    id = fields.Str(required=True)
    post_id = fields.Str(required=True)
    user_id = fields.Str(required=True)
    text = fields.Str(required=True)
    created_at = fields.DateTime(required=True)
