"""
Ownership checks for videos, playlists, comments and tweets.
Ownership is a single user id on the resource; there are no roles or groups.
"""
from utils.exceptions import Forbidden


def is_owner(resource, identity_id) -> bool:
    owner_id = getattr(resource, "owner_id", None)
    if owner_id is None or identity_id is None:
        return False
    return owner_id == identity_id


def ensure_owner(resource, identity_id, message: str | None = None) -> None:
    """Raise Forbidden unless identity_id owns resource. Call before mutating."""
    if not is_owner(resource, identity_id):
        raise Forbidden(message)
