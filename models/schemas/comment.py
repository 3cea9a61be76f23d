from marshmallow import Schema, fields

from models.schemas.common import OwnerOutSchema, StrippedSchema, not_blank


class CommentSchema(StrippedSchema):
    content = fields.String(required=True, validate=not_blank)


class CommentOutSchema(Schema):
    id = fields.String()
    content = fields.String()
    video_id = fields.String()
    owner_id = fields.String()
    owner = fields.Nested(OwnerOutSchema)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
