"""Signed tokens for magic links and sessions.

Both token kinds are HS256 JWTs carrying a ``type`` claim. Each kind has
its own signing secret, so a magic link can never be replayed as a
session cookie or the other way around.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

import jwt
import structlog

from procurement.domain.state_machines import Role
from procurement.domain.value_objects import User

logger = structlog.get_logger()

ALGORITHM = "HS256"
MAGIC_LINK_TOKEN_TYPE = "magic-link"
SESSION_TOKEN_TYPE = "session"
CALLBACK_PATH = "/auth/callback"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Issues and verifies magic-link and session tokens.

    Verification never raises: any failure (bad signature, expiry, wrong
    type, missing claims) yields None.
    """

    def __init__(
        self,
        jwt_secret: str,
        magic_link_secret: str,
        public_base_url: str,
        session_ttl_seconds: int = 8 * 60 * 60,
        magic_link_ttl_seconds: int = 15 * 60,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize token service.

        Args:
            jwt_secret: Secret for session tokens.
            magic_link_secret: Secret for magic-link tokens.
            public_base_url: Base URL used to build magic links.
            session_ttl_seconds: Session lifetime.
            magic_link_ttl_seconds: Magic link lifetime.
            clock: Source of the current time.
        """
        self.jwt_secret = jwt_secret
        self.magic_link_secret = magic_link_secret
        self.public_base_url = public_base_url.rstrip("/")
        self.session_ttl = timedelta(seconds=session_ttl_seconds)
        self.magic_link_ttl = timedelta(seconds=magic_link_ttl_seconds)
        self.clock = clock

    # -------------------------------------------------------------------------
    # Magic links
    # -------------------------------------------------------------------------

    def issue_magic_link(self, email: str) -> str:
        payload = {
            "email": email,
            "type": MAGIC_LINK_TOKEN_TYPE,
            "exp": self.clock() + self.magic_link_ttl,
        }
        return jwt.encode(payload, self.magic_link_secret, algorithm=ALGORITHM)

    def verify_magic_link(self, token: str | None) -> str | None:
        """Verify a magic-link token.

        Returns:
            The email claim, or None if the token is not valid.
        """
        payload = self._decode(token, self.magic_link_secret, MAGIC_LINK_TOKEN_TYPE)
        if payload is None:
            return None
        email = payload.get("email")
        return email if isinstance(email, str) and email else None

    def build_magic_link_url(self, token: str) -> str:
        return f"{self.public_base_url}{CALLBACK_PATH}?{urlencode({'token': token})}"

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def issue_session(self, user: User) -> str:
        payload = {
            "id": user.id,
            "email": user.email,
            "role": user.role.value,
            "name": user.name,
            "type": SESSION_TOKEN_TYPE,
            "exp": self.clock() + self.session_ttl,
        }
        return jwt.encode(payload, self.jwt_secret, algorithm=ALGORITHM)

    def verify_session(self, token: str | None) -> User | None:
        """Verify a session token.

        Returns:
            The user encoded in the token, or None if the token is not valid.
        """
        payload = self._decode(token, self.jwt_secret, SESSION_TOKEN_TYPE)
        if payload is None:
            return None
        try:
            return User(
                id=str(payload["id"]),
                email=str(payload["email"]),
                role=Role(payload["role"]),
                name=str(payload.get("name") or ""),
            )
        except (KeyError, ValueError) as e:
            logger.debug("Session token has invalid claims", error=str(e))
            return None

    def _decode(self, token: str | None, secret: str, expected_type: str) -> dict | None:
        if not token:
            return None
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Token expired", token_type=expected_type)
            return None
        except jwt.InvalidTokenError as e:
            logger.debug("Token rejected", token_type=expected_type, error=str(e))
            return None
        if payload.get("type") != expected_type:
            logger.debug("Token has wrong type", expected=expected_type, actual=payload.get("type"))
            return None
        return payload
