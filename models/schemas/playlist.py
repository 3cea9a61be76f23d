from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from models.schemas.common import StrippedSchema, not_blank


class PlaylistCreateSchema(StrippedSchema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(required=True, validate=not_blank)


class PlaylistUpdateSchema(StrippedSchema):
    name = fields.String(validate=validate.Length(min=1, max=255))
    description = fields.String(validate=not_blank)

    @validates_schema
    def _require_any(self, data, **kwargs):
        if not data:
            raise ValidationError("Provide name or description")


class PlaylistOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    description = fields.String()
    owner_id = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
    video_ids = fields.Method("get_video_ids")

    def get_video_ids(self, obj):
        return [v.id for v in getattr(obj, "videos", [])]
