"""JSON-file user directory with bcrypt password hashes."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import bcrypt

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class Session:
    """A logged-in device."""

    session_id: str
    user_agent: str = "Unknown"
    ip_address: str | None = None
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "userAgent": self.user_agent,
            "ipAddress": self.ip_address,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Session:
        return cls(
            session_id=data["sessionId"],
            user_agent=data.get("userAgent", "Unknown"),
            ip_address=data.get("ipAddress"),
            created_at=data.get("createdAt") or _utc_now(),
        )


@dataclass(slots=True)
class User:
    id: int
    username: str
    password_hash: str
    is_admin: bool = False
    active_sessions: list[Session] = field(default_factory=list)
    created_at: str = field(default_factory=_utc_now)

    def check_password(self, password: str) -> bool:
        return bcrypt.checkpw(password.encode("utf-8"), self.password_hash.encode("utf-8"))

    def has_session(self, session_id: str) -> bool:
        return any(s.session_id == session_id for s in self.active_sessions)

    def to_dict(self) -> dict:
        """Serialize for the users file."""
        return {
            "id": self.id,
            "username": self.username,
            "passwordHash": self.password_hash,
            "isAdmin": self.is_admin,
            "activeSessions": [s.to_dict() for s in self.active_sessions],
            "createdAt": self.created_at,
        }

    def to_public_dict(self) -> dict:
        """Summary safe to return to admin clients."""
        return {
            "id": self.id,
            "username": self.username,
            "isAdmin": self.is_admin,
            "activeSessions": len(self.active_sessions),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> User:
        return cls(
            id=int(data["id"]),
            username=data["username"],
            password_hash=data["passwordHash"],
            is_admin=bool(data.get("isAdmin", False)),
            active_sessions=[Session.from_dict(s) for s in data.get("activeSessions", [])],
            created_at=data.get("createdAt") or _utc_now(),
        )


class UserStore:
    """User list persisted as a JSON file.

    The whole list lives in memory; every mutation rewrites the file. Mutations
    are serialized with an asyncio lock, and file I/O and hashing run in worker
    threads so they never block the event loop.
    """

    def __init__(self, path: str | Path, bcrypt_rounds: int = 10) -> None:
        self._path = Path(path)
        self._rounds = bcrypt_rounds
        self._users: dict[int, User] = {}
        self._lock = asyncio.Lock()

    async def load(self, admin_username: str = "", admin_password: str = "") -> None:
        """Load the users file. When it does not exist, seed it with an admin if credentials are given."""
        data = await asyncio.to_thread(self._read)
        if data is not None:
            self._users = {user.id: user for user in (User.from_dict(d) for d in data)}
            logger.info("Loaded %d users from %s", len(self._users), self._path)
            return

        self._users = {}
        if admin_username and admin_password:
            await self.add(admin_username, admin_password, is_admin=True)
            logger.info("Created users file %s with admin %s", self._path, admin_username)
        else:
            logger.warning("No users file at %s and no admin credentials configured", self._path)

    def get(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    def find_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    def users(self) -> list[User]:
        return sorted(self._users.values(), key=lambda u: u.id)

    async def verify_password(self, user: User, password: str) -> bool:
        return await asyncio.to_thread(user.check_password, password)

    async def add(self, username: str, password: str, is_admin: bool = False) -> User:
        """Create a user. Raises ValueError if the username is taken."""
        password_hash = await asyncio.to_thread(self._hash, password)
        async with self._lock:
            if self.find_by_username(username) is not None:
                raise ValueError(f"Username already exists: {username}")
            user_id = max(self._users, default=0) + 1
            user = User(id=user_id, username=username, password_hash=password_hash, is_admin=is_admin)
            self._users[user_id] = user
            await self._save()
        return user

    async def delete(self, user_id: int) -> bool:
        async with self._lock:
            if self._users.pop(user_id, None) is None:
                return False
            await self._save()
        return True

    async def add_session(self, user_id: int, session: Session, limit: int | None = None) -> bool:
        """Record a session. Returns False, changing nothing, when ``limit`` sessions already exist."""
        async with self._lock:
            user = self._users[user_id]
            if limit is not None and len(user.active_sessions) >= limit:
                return False
            user.active_sessions.append(session)
            await self._save()
        return True

    async def remove_session(self, user_id: int, session_id: str) -> bool:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            user.active_sessions = [s for s in user.active_sessions if s.session_id != session_id]
            await self._save()
        return True

    def __len__(self) -> int:
        return len(self._users)

    # --- Internal ---

    def _hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    async def _save(self) -> None:
        snapshot = [user.to_dict() for user in self.users()]
        await asyncio.to_thread(self._write, snapshot)

    def _read(self) -> list[dict] | None:
        try:
            return json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None

    def _write(self, snapshot: list[dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(snapshot, indent=2), encoding="utf-8")
        tmp.replace(self._path)
