# bookmarket/auth.py
"""Password hashing and stateless session tokens.

Sessions are never stored server-side. A token is the signed identity
`{userId, email, name, admin}` plus the signing timestamp; it is valid iff the
signature verifies and it is younger than 24 hours. Logging out only deletes
the cookie, the token itself stays valid until it expires.
"""
from typing import Optional

import bcrypt
from fastapi import Response
from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

from .config import SESSION_MAX_AGE
from .exceptions import ConfigurationError
from .schemas import SessionData
from .utils import logger

SESSION_COOKIE_NAME = "session"
_SALT = "bookmarket-session"


def hash_password(password: str, rounds: int = 14) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


class SessionManager:
    """Issues and verifies session tokens, and sets/clears the session cookie."""

    def __init__(self, secret: str, secure_cookie: bool = False, max_age: int = SESSION_MAX_AGE):
        if not secret:
            raise ConfigurationError("SESSION_SECRET is required")
        self._serializer = URLSafeTimedSerializer(secret_key=secret, salt=_SALT)
        self.secure_cookie = secure_cookie
        self.max_age = max_age

    def issue(self, identity: SessionData) -> str:
        return self._serializer.dumps(identity.model_dump(by_alias=True))

    def verify(self, token: Optional[str]) -> Optional[SessionData]:
        """Return the embedded identity, or None for any invalid token."""
        if not token:
            return None
        try:
            data = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired:
            logger.debug("Rejected expired session token")
            return None
        except BadData:
            logger.debug("Rejected malformed or forged session token")
            return None
        if not isinstance(data, dict):
            return None
        try:
            return SessionData.model_validate(data)
        except ValueError:
            return None

    def attach(self, response: Response, identity: SessionData) -> None:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=self.issue(identity),
            max_age=self.max_age,
            path="/",
            httponly=True,
            secure=self.secure_cookie,
            samesite="strict",
        )

    def clear(self, response: Response) -> None:
        response.delete_cookie(
            key=SESSION_COOKIE_NAME,
            path="/",
            httponly=True,
            secure=self.secure_cookie,
            samesite="strict",
        )
