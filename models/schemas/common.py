from marshmallow import Schema, ValidationError, fields, pre_load


def strip_strings(data):
    """Trim surrounding whitespace on the string values of a payload."""
    if not isinstance(data, dict):
        return data
    # passwords are taken verbatim
    return {
        k: (v.strip() if isinstance(v, str) and "password" not in k else v)
        for k, v in data.items()
    }


def not_blank(value: str) -> None:
    if value is None or not str(value).strip():
        raise ValidationError("Field may not be blank.")


def validate_url(value: str) -> None:
    not_blank(value)
    if not value.startswith(("http://", "https://")):
        raise ValidationError("Must be an http(s) URL.")
    if len(value) > 1024:
        raise ValidationError("URL is too long.")


class StrippedSchema(Schema):
    """Base for input schemas: whitespace is trimmed before validation."""

    @pre_load
    def _strip(self, data, **kwargs):
        return strip_strings(data)


class OwnerOutSchema(Schema):
    """Public projection of a user embedded in other resources."""
    id = fields.String()
    username = fields.String()
    full_name = fields.String()
    avatar_url = fields.String(allow_none=True)
