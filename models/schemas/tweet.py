from marshmallow import Schema, fields

from models.schemas.common import StrippedSchema, not_blank


class TweetSchema(StrippedSchema):
    content = fields.String(required=True, validate=not_blank)


class TweetOutSchema(Schema):
    id = fields.String()
    content = fields.String()
    owner_id = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
