"""Session cookie handling.

The session is a signed token stored in an HttpOnly cookie. The gateway
turns the raw cookie value into a User and writes or clears the cookie
on responses.
"""

from starlette.responses import Response

from procurement.application.tokens import TokenService
from procurement.domain.exceptions import AuthenticationRequiredError
from procurement.domain.value_objects import User

SESSION_COOKIE_NAME = "session-token"


class SessionGateway:
    """Authenticates requests from the session cookie."""

    def __init__(self, tokens: TokenService, max_age_seconds: int, secure: bool = True) -> None:
        self.tokens = tokens
        self.max_age_seconds = max_age_seconds
        self.secure = secure

    def authenticate(self, cookie_value: str | None) -> User | None:
        """Resolve the user for a cookie value, or None."""
        return self.tokens.verify_session(cookie_value)

    def require_user(self, cookie_value: str | None) -> User:
        """Resolve the user or raise.

        Raises:
            AuthenticationRequiredError: If the cookie is missing or invalid.
        """
        user = self.authenticate(cookie_value)
        if user is None:
            raise AuthenticationRequiredError()
        return user

    def set_session_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=token,
            max_age=self.max_age_seconds,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )

    def clear_session_cookie(self, response: Response) -> None:
        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value="",
            max_age=0,
            path="/",
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )
