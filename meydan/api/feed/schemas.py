# meydan/api/feed/schemas.py
from marshmallow import Schema, fields

from meydan.api.users.schemas import ProfileSchema
from meydan.utils.datetime_utils import DateTimeUtils


# --- 재사용을 위한 중첩 스키마 ---
class FeedAuthorSchema(Schema):
    """게시물/댓글에 포함될 작성자 정보 스키마."""
    id = fields.Str(required=True)
    name = fields.Str(required=True)
    avatar = fields.Str(required=True)


class MediaSchema(Schema):
    url = fields.Str(required=True)
    type = fields.Function(lambda media: media.type.value)


class FeedCommentSchema(Schema):
    id = fields.Str(required=True)
    text = fields.Str(required=True)
    created_at = fields.DateTime(required=True)
    user = fields.Nested(FeedAuthorSchema, required=True)


class FeedPostSchema(Schema):
    """집계된 게시물 한 건의 응답 형식."""
    id = fields.Str(required=True)
    user = fields.Nested(FeedAuthorSchema, required=True)
    content = fields.Str(required=True)
    media = fields.Nested(MediaSchema, allow_none=True)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(allow_none=True)
    likes = fields.Int(required=True)
    is_liked = fields.Bool(required=True)
    is_edited = fields.Bool(dump_only=True)
    time_ago = fields.Function(lambda post: DateTimeUtils.time_ago(post.created_at))
    comments = fields.List(fields.Nested(FeedCommentSchema))


class FeedResponseSchema(Schema):
    """GET /api/feed 응답: 현재 사용자, 게시물 목록, 닫을 수 있는 오류 배너."""
    viewer = fields.Nested(ProfileSchema, allow_none=True)
    posts = fields.List(fields.Nested(FeedPostSchema))
    error = fields.Str(allow_none=True)
