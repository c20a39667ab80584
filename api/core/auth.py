"""Session-based user resolution for authenticated routes.

The signed session cookie (Starlette SessionMiddleware) carries the
authenticated user's ID under "user_id". Issuing that session is handled
elsewhere; these dependencies only read it.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from core.logger import bind_contextvars

SESSION_USER_KEY = "user_id"


def get_user_id_from_request(request: Request) -> str | None:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id in (None, ""):
        return None
    return str(user_id)


async def require_auth(request: Request) -> str:
    """Raises 401 if not authenticated. Sets request.state.user_id."""
    user_id = get_user_id_from_request(request)
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    request.state.user_id = user_id
    bind_contextvars(user_id=user_id)
    return user_id


UserId = Annotated[str, Depends(require_auth)]
