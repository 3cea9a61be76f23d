from marshmallow import Schema, fields, pre_load, validates, validates_schema, ValidationError

from models.schemas.common import StrippedSchema, not_blank, validate_url


def _casefold(v):
    return v.strip().lower() if isinstance(v, str) else v


def _validate_password(value):
    if len(value) < 8:
        raise ValidationError("Password must be at least 8 characters long.")


class UserCreateSchema(StrippedSchema):
    username = fields.String(required=True, validate=not_blank)
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    full_name = fields.String(required=True, validate=not_blank)
    avatar_url = fields.String(allow_none=True, validate=validate_url)
    avatar_public_id = fields.String(allow_none=True)
    cover_image_url = fields.String(allow_none=True, validate=validate_url)
    cover_image_public_id = fields.String(allow_none=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            for key in ("username", "email"):
                if key in data:
                    data[key] = _casefold(data[key])
        return data

    @validates("username")
    def validate_username(self, value, **kwargs):
        if len(value) > 64:
            raise ValidationError("Username must be at most 64 characters long.")
        if any(ch.isspace() for ch in value):
            raise ValidationError("Username may not contain whitespace.")

    @validates("password")
    def validate_password(self, value, **kwargs):
        _validate_password(value)


class UserLoginSchema(StrippedSchema):
    username = fields.String()
    email = fields.String()
    password = fields.String(required=True, load_only=True)

    @validates_schema
    def require_identifier(self, data, **kwargs):
        if not (data.get("username") or data.get("email")):
            raise ValidationError("username or email is required", field_name="username")


class UserUpdateSchema(StrippedSchema):
    full_name = fields.String(validate=not_blank)
    email = fields.Email()

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data["email"] = _casefold(data["email"])
        return data

    @validates_schema
    def require_any(self, data, **kwargs):
        if not data:
            raise ValidationError("Provide full_name or email")


class ChangePasswordSchema(StrippedSchema):
    old_password = fields.String(required=True, load_only=True, validate=not_blank)
    new_password = fields.String(required=True, load_only=True)

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        _validate_password(value)


class ImageUpdateSchema(StrippedSchema):
    url = fields.String(required=True, validate=validate_url)
    public_id = fields.String(allow_none=True)


class UserOutSchema(Schema):
    """Identity view: password hash and refresh token are never declared here."""
    id = fields.String()
    username = fields.String()
    email = fields.String()
    full_name = fields.String()
    avatar_url = fields.String(allow_none=True)
    cover_image_url = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class ChannelProfileOutSchema(Schema):
    id = fields.String()
    username = fields.String()
    email = fields.String()
    full_name = fields.String()
    avatar_url = fields.String(allow_none=True)
    cover_image_url = fields.String(allow_none=True)
    subscribers_count = fields.Integer()
    channels_subscribed_to_count = fields.Integer()
    is_subscribed = fields.Boolean()
