"""Session token lifecycle management.

Sessions are stored in Valkey with TTL matching session expiry.
Token format is cryptographically random (secrets.token_urlsafe). The
identity integration signs technicians in through auth.api.start_session,
which calls create_session; everything else only validates or revokes.
"""

import logging
import secrets
from datetime import timedelta

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.types import Session
from auth.exceptions import SessionExpiredError
from utils.timezone import now_utc, parse_iso

logger = logging.getLogger(__name__)


class SessionManager:
    """Session token lifecycle management.

    Sessions are stored in Valkey with TTL matching session expiry.
    Supports sliding expiry on activity.
    """

    KEY_PREFIX = "session:"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._config = config

    def _key(self, token: str) -> str:
        """Generate Valkey key for session token."""
        return f"{self.KEY_PREFIX}{token}"

    def _store(self, session: Session) -> None:
        self._valkey.set_json(
            self._key(session.token),
            {
                "owner_id": session.owner_id,
                "email": session.email,
                "created_at": session.created_at.isoformat(),
                "expires_at": session.expires_at.isoformat(),
                "last_activity_at": session.last_activity_at.isoformat(),
            },
            expire_seconds=self._config.session_expiry_hours * 3600,
        )

    def create_session(self, owner_id: str, email: str | None = None) -> Session:
        """Create new session for an authenticated technician."""
        now = now_utc()
        session = Session(
            token=secrets.token_urlsafe(32),
            owner_id=owner_id,
            email=email,
            created_at=now,
            expires_at=now + timedelta(hours=self._config.session_expiry_hours),
            last_activity_at=now,
        )
        self._store(session)
        logger.info(f"Session created for owner {owner_id}")
        return session

    def validate_session(self, token: str) -> Session:
        """Validate session token and return session.

        Raises SessionExpiredError if token invalid or expired.
        Extends session when session_extend_on_activity is set.
        """
        data = self._valkey.get_json(self._key(token))

        if data is None:
            raise SessionExpiredError("Session not found or expired")

        session = Session(
            token=token,
            owner_id=data["owner_id"],
            email=data.get("email"),
            created_at=parse_iso(data["created_at"]),
            expires_at=parse_iso(data["expires_at"]),
            last_activity_at=parse_iso(data["last_activity_at"]),
        )

        # Valkey TTL should already have dropped it
        if now_utc() > session.expires_at:
            self._valkey.delete(self._key(token))
            raise SessionExpiredError("Session expired")

        if self._config.session_extend_on_activity:
            session = self._extend_session(session)

        return session

    def _extend_session(self, session: Session) -> Session:
        """Extend session expiry and update last_activity_at."""
        now = now_utc()
        updated = session.model_copy(update={
            "expires_at": now + timedelta(hours=self._config.session_expiry_hours),
            "last_activity_at": now,
        })
        self._store(updated)
        return updated

    def revoke_session(self, token: str) -> None:
        """Revoke session (logout).

        Safe to call with nonexistent token.
        """
        self._valkey.delete(self._key(token))
