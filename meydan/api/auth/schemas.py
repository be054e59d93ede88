# meydan/api/auth/schemas.py
from marshmallow import Schema, fields, validate


class CredentialsSchema(Schema):
    """POST /api/auth/login, /api/auth/signup 요청 본문."""
    email = fields.Email(required=True)
    password = fields.Str(required=True, validate=validate.Length(min=6))


class IdTokenSchema(Schema):
    """POST /api/auth/session 요청 본문."""
    id_token = fields.Str(required=True, validate=validate.Length(min=1))
