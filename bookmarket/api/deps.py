# bookmarket/api/deps.py
"""FastAPI dependencies for the caller's session."""
from typing import Optional

from fastapi import Depends, Request

from ..auth import SESSION_COOKIE_NAME, SessionManager
from ..exceptions import AuthenticationError, AuthorizationError
from ..images import ImgurClient
from ..schemas import SessionData


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_image_host(request: Request) -> ImgurClient:
    return request.app.state.image_host


def get_session(request: Request, sessions: SessionManager = Depends(get_sessions)) -> Optional[SessionData]:
    """Caller identity, or None when there is no valid session cookie."""
    return sessions.verify(request.cookies.get(SESSION_COOKIE_NAME))


def require_session(caller: Optional[SessionData] = Depends(get_session)) -> SessionData:
    if caller is None:
        raise AuthenticationError()
    return caller


def require_admin(caller: SessionData = Depends(require_session)) -> SessionData:
    if not caller.admin:
        raise AuthorizationError("Admin access required")
    return caller
