from marshmallow import Schema, fields, validate, validates, validates_schema, ValidationError

from models.schemas.common import OwnerOutSchema, StrippedSchema, not_blank, validate_url


class VideoCreateSchema(StrippedSchema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(required=True, validate=not_blank)
    video_file_url = fields.String(required=True, validate=validate_url)
    video_file_public_id = fields.String(allow_none=True)
    thumbnail_url = fields.String(required=True, validate=validate_url)
    thumbnail_public_id = fields.String(allow_none=True)
    duration = fields.Float(required=True)
    is_published = fields.Boolean(load_default=True)

    @validates("duration")
    def _validate_duration(self, value, **kwargs):
        if value < 0:
            raise ValidationError("duration must be >= 0.")


class VideoUpdateSchema(StrippedSchema):
    # All optional, but validate if present
    title = fields.String(validate=validate.Length(min=1, max=255))
    description = fields.String()
    thumbnail_url = fields.String(validate=validate_url)
    thumbnail_public_id = fields.String(allow_none=True)

    @validates_schema
    def _require_any(self, data, **kwargs):
        if not data:
            raise ValidationError("Provide at least one of title, description, thumbnail_url")


class VideoOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    description = fields.String(allow_none=True)
    video_file_url = fields.String()
    thumbnail_url = fields.String()
    duration = fields.Float()
    views = fields.Integer()
    is_published = fields.Boolean()
    owner_id = fields.String()
    owner = fields.Nested(OwnerOutSchema)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
