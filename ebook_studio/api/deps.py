"""Request dependencies."""

from fastapi import Header

from ebook_studio.api.exceptions import UnauthorizedError


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Resolved user identity, set by the upstream authentication layer."""
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError()
    return x_user_id.strip()
