# meydan/api/users/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError


class ProfileSchema(Schema):
    """현재 사용자 또는 작성자의 공개 프로필."""
    id = fields.Str(required=True, dump_only=True)
    name = fields.Str(required=True)
    avatar_url = fields.Str(required=True)
    updated_at = fields.DateTime(allow_none=True)


class ProfileUpdateSchema(Schema):
    """PATCH /api/users/me 요청 본문. 최소 한 필드는 있어야 합니다."""
    name = fields.Str(validate=validate.Length(min=1, max=50))
    avatar_url = fields.URL()

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("name 또는 avatar_url 중 하나는 필요합니다.")
