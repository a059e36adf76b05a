"""Login, logout and bearer-token verification."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from ..errors import ApiError
from .users import Session, User, UserStore

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True, slots=True)
class Identity:
    """Who a verified token belongs to."""

    user_id: int
    username: str
    session_id: str
    is_admin: bool = False


class AuthService:
    """Issues and verifies session tokens against the user store.

    A token is only valid while its session is still listed on the user, so
    logging out (or deleting the user) revokes it before it expires.
    """

    def __init__(
        self,
        users: UserStore,
        secret: str,
        token_ttl: timedelta = timedelta(hours=24),
        max_devices: int = 2,
    ) -> None:
        self.users = users
        self._secret = secret
        self._ttl = token_ttl
        self._max_devices = max_devices

    async def login(
        self,
        username: str,
        password: str,
        user_agent: str = "Unknown",
        ip_address: str | None = None,
    ) -> tuple[str, User]:
        """Check credentials, open a session and return ``(token, user)``."""
        user = self.users.find_by_username(username)
        if user is None or not await self.users.verify_password(user, password):
            raise ApiError(401, "Invalid credentials")

        session = Session(
            session_id=secrets.token_urlsafe(24),
            user_agent=user_agent or "Unknown",
            ip_address=ip_address,
        )
        if not await self.users.add_session(user.id, session, limit=self._max_devices):
            raise ApiError(
                403, f"Maximum number of active devices ({self._max_devices}) reached"
            )

        logger.info("User %s logged in (%d active sessions)", user.username, len(user.active_sessions))
        return self.issue_token(user, session.session_id), user

    async def logout(self, identity: Identity) -> None:
        if not await self.users.remove_session(identity.user_id, identity.session_id):
            raise ApiError(404, "User not found")
        logger.info("User %s logged out", identity.username)

    def issue_token(self, user: User, session_id: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "id": user.id,
            "username": user.username,
            "sessionId": session_id,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str | None) -> Identity | None:
        """Identity for a valid, unexpired, unrevoked token; None for anything else."""
        if not token:
            return None
        try:
            claims = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except jwt.PyJWTError as e:
            logger.debug("Rejected token: %s", e)
            return None

        user = self.users.get(claims.get("id"))
        session_id = claims.get("sessionId")
        if user is None or not session_id or not user.has_session(session_id):
            return None
        return Identity(
            user_id=user.id,
            username=user.username,
            session_id=session_id,
            is_admin=user.is_admin,
        )
