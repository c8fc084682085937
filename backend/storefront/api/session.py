from typing import Optional

from fastapi import Request, Response

from storefront.config import settings
from storefront.services.cart_service import new_session_id


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session_id,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
    )


def ensure_session_id(request: Request, response: Response) -> str:
    """Return the caller's session id, issuing a fresh cookie if there is none."""
    session_id = get_session_id(request) or new_session_id()
    _set_session_cookie(response, session_id)
    return session_id


def touch_session_id(request: Request, response: Response) -> Optional[str]:
    """Refresh the cookie of an existing session; never starts a new one."""
    session_id = get_session_id(request)
    if session_id:
        _set_session_cookie(response, session_id)
    return session_id
