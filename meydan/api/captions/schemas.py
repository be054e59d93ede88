# meydan/api/captions/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError


class ImagePayloadSchema(Schema):
    data = fields.Str(required=True, validate=validate.Length(min=1))
    mime_type = fields.Str(required=True, data_key='mimeType')


class CaptionRequestSchema(Schema):
    """캡션 프록시 요청 본문: {type, prompt?, image?: {data, mimeType}}"""
    type = fields.Str(required=True, validate=validate.OneOf(['text', 'image']))
    prompt = fields.Str(load_default=None, allow_none=True)
    image = fields.Nested(ImagePayloadSchema, load_default=None, allow_none=True)

    @validates_schema
    def validate_payload(self, data, **kwargs):
        if data['type'] == 'image' and not data.get('image'):
            raise ValidationError("Invalid request type or missing image data.")
        if data['type'] == 'text' and not (data.get('prompt') or "").strip():
            raise ValidationError("A prompt is required for text captions.")
