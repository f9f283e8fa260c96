"""Request-scoped dependencies: caller identity."""
from __future__ import annotations

from uuid import UUID

from fastapi import Request

from goalplanner.core.context import user_id_ctx_var
from goalplanner.core.errors import AuthFailure
from goalplanner.core.security import decode_access_token

BEARER_PREFIX = "bearer "


async def get_current_user_id(request: Request) -> UUID:
    """Resolve the caller from the Authorization header.

    Accepts ``Bearer <token>`` as well as a bare token.
    """
    header = request.headers.get("Authorization")
    if not header or not header.strip():
        raise AuthFailure("Access denied")

    token = header.strip()
    if token.lower().startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthFailure("Access denied")

    user_id = decode_access_token(token)
    request.state.user_id = user_id
    user_id_ctx_var.set(str(user_id))
    return user_id
