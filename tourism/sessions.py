import json
import logging
import sqlite3
from typing import Optional

from .models import Session

logger = logging.getLogger(__name__)

SESSION_KEY = "@user_session"


class SessionStore:
    """The single "who is logged in on this device" slot."""

    def __init__(self, storage, key=SESSION_KEY):
        self.storage = storage
        self.key = key

    def store(self, session: Session):
        self.storage.set_item(self.key, json.dumps(session.to_dict()))

    def get(self) -> Optional[Session]:
        try:
            raw = self.storage.get_item(self.key)
            if raw is None:
                logger.debug("No stored session")
                return None
            return Session.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, OSError) as exc:
            logger.warning("Stored session is corrupt, ignoring it: %s", exc)
            return None

    def clear(self):
        self.storage.remove_item(self.key)


class SessionVerifier:
    """Drops stored sessions whose account no longer exists locally."""

    def __init__(self, database, store: SessionStore):
        self.database = database
        self.store = store

    def verify(self, session: Optional[Session]) -> Optional[Session]:
        if session is None:
            return None
        try:
            row = self.database.open().execute(
                "SELECT id FROM accounts WHERE id = ? AND email = ?",
                (session.account.id, session.email),
            ).fetchone()
        except (sqlite3.Error, OSError):
            logger.exception("Could not verify session, forcing sign-in")
            row = None

        if row is None:
            logger.info("Session for %s is stale, clearing it", session.email)
            self.store.clear()
            return None
        return session

    def current(self) -> Optional[Session]:
        return self.verify(self.store.get())
