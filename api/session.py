"""Signed trainer sessions and the store holding their game and drill state."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Annotated, Any
from uuid import uuid4

from fastapi import Header, HTTPException
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from config import config

logger = logging.getLogger(__name__)

# Session data keys
SESSION_KEY_GAME = "game"
SESSION_KEY_DRILL = "drill"
SESSION_KEY_CREATED_AT = "created_at"
SESSION_KEY_LAST_ACTIVITY = "last_activity"


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key or config.security.secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify a signed token.

        Args:
            token: The signed token to verify
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The session ID if valid, None otherwise
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except (BadSignature, SignatureExpired):
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class SessionStore(ABC):
    """Abstract store of per-session trainer data, keyed by signed session token."""

    @abstractmethod
    async def get(self, session_id: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    async def set(self, session_id: str, data: dict[str, Any], ttl: int | None = None) -> None:
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        ...

    async def exists(self, session_id: str) -> bool:
        return await self.get(session_id) is not None

    def create_session_id(self) -> str:
        """Create a new signed session token."""
        return get_session_signer().sign(str(uuid4()))


class InMemorySessionStore(SessionStore):
    """Process-local session store; entries expire ``ttl`` seconds after their last write."""

    def __init__(self) -> None:
        self._sessions: dict[str, tuple[dict[str, Any], datetime]] = {}

    async def get(self, session_id: str) -> dict[str, Any] | None:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None

        data, expiry = entry
        if expiry < datetime.now():
            await self.delete(session_id)
            return None
        return data

    async def set(
        self,
        session_id: str,
        data: dict[str, Any],
        ttl: int | None = None,
    ) -> None:
        expiry = datetime.now() + timedelta(seconds=ttl or config.session_ttl)
        self._sessions[session_id] = (data, expiry)

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def cleanup_expired(self) -> int:
        """Remove expired sessions and return how many were dropped."""
        now = datetime.now()
        expired = [sid for sid, (_, expiry) in self._sessions.items() if expiry < now]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug("Removed %d expired sessions", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


_session_store: SessionStore | None = None


async def get_session_store() -> SessionStore:
    """Get or create the session store."""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore()
    return _session_store


async def create_session() -> str:
    """Start an empty session and return its signed token."""
    store = await get_session_store()
    session_id = store.create_session_id()
    now = int(datetime.now().timestamp())
    await store.set(session_id, {SESSION_KEY_CREATED_AT: now, SESSION_KEY_LAST_ACTIVITY: now})
    logger.info("Created session %s", session_id[:8])
    return session_id


async def load_session_value(session_id: str, key: str) -> Any | None:
    """Read one entry (game, drill, ...) of a session."""
    store = await get_session_store()
    data = await store.get(session_id)
    if data is None:
        return None
    return data.get(key)


async def save_session_value(session_id: str, key: str, value: Any) -> None:
    """Write one entry of a session and refresh its activity stamp and expiry."""
    store = await get_session_store()
    data = await store.get(session_id) or {}
    now = int(datetime.now().timestamp())
    data[key] = value
    data[SESSION_KEY_LAST_ACTIVITY] = now
    data.setdefault(SESSION_KEY_CREATED_AT, now)
    await store.set(session_id, data)


def extract_session_id(token: str) -> str | None:
    """Return the raw session ID inside a signed token, or None if it does not verify."""
    return get_session_signer().unsign(token)


async def require_session(
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> str:
    """FastAPI dependency: the request's session token, rejected unless it verifies."""
    if session_id is None:
        raise HTTPException(status_code=401, detail="Missing session")
    if extract_session_id(session_id) is None:
        logger.info("Rejected unverifiable session token")
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return session_id
