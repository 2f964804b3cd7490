import logging
import sqlite3
from typing import List, Optional

from .. import ids
from ..errors import (
    DuplicateEmail,
    InvalidCredentials,
    StorageFailure,
    TourismError,
    ValidationFailed,
)
from ..models import Account, AuthResult, Result, Session
from ..security import hash_password, verify_password
from ..utils import default_username, normalize_email, require_email

logger = logging.getLogger(__name__)

ACCOUNT_COLUMNS = "id, username, email, created_at"


class AccountRepository:
    """Sign-up, sign-in and sign-out against the local accounts table.

    Every public operation returns a value object; failures are reported in
    its ``error`` field instead of being raised.
    """

    def __init__(self, database, sessions, sync=None):
        self.database = database
        self.sessions = sessions
        self.sync = sync

    def sign_up(self, email, password, username=None) -> AuthResult:
        try:
            normalized = require_email(email)
            if not isinstance(password, str) or not password:
                raise ValidationFailed("Password is required")
            if username is not None and not isinstance(username, str):
                raise ValidationFailed("Username must be text")
            password_hash = hash_password(password)
            display_name = (username or "").strip() or default_username(normalized)
            new_id = ids.account_id()

            with self.database.transaction() as db:
                try:
                    db.execute(
                        "INSERT INTO accounts (id, username, email, password_hash) VALUES (?, ?, ?, ?)",
                        (new_id, display_name, normalized, password_hash),
                    )
                except sqlite3.IntegrityError as exc:
                    if "accounts.email" in str(exc):
                        raise DuplicateEmail() from exc
                    raise

            row = self.database.open().execute(
                "SELECT id, username, email, password_hash, created_at FROM accounts WHERE id = ?",
                (new_id,),
            ).fetchone()
            if row is None:
                raise StorageFailure("Account could not be created")

            session = self._start_session(Account.from_row(row))
        except TourismError as exc:
            logger.info("Sign up rejected: %s", exc.message)
            return AuthResult.fail(exc)
        except (sqlite3.Error, OSError):
            logger.exception("Sign up failed")
            return AuthResult.fail(StorageFailure())

        self._sync_account(row)
        return AuthResult(session=session)

    def sign_in(self, email, password) -> AuthResult:
        try:
            normalized = require_email(email)
            row = self.database.open().execute(
                "SELECT id, username, email, password_hash, created_at FROM accounts WHERE email = ?",
                (normalized,),
            ).fetchone()

            if (
                row is None
                or not isinstance(password, str)
                or not verify_password(password, row["password_hash"])
            ):
                raise InvalidCredentials()

            session = self._start_session(Account.from_row(row))
        except TourismError as exc:
            logger.info("Sign in rejected: %s", exc.message)
            return AuthResult.fail(exc)
        except (sqlite3.Error, OSError):
            logger.exception("Sign in failed")
            return AuthResult.fail(StorageFailure())

        self._sync_account(row)
        return AuthResult(session=session)

    def sign_out(self) -> Result:
        try:
            self.sessions.clear()
        except OSError:
            logger.exception("Sign out failed")
            return Result.fail(StorageFailure("Could not sign out"))
        return Result.ok()

    def get(self, account_id) -> Optional[Account]:
        row = self.database.open().execute(
            f"SELECT {ACCOUNT_COLUMNS} FROM accounts WHERE id = ?", (account_id,)
        ).fetchone()
        return Account.from_row(row) if row else None

    def list_all(self) -> List[Account]:
        rows = self.database.open().execute(
            f"SELECT {ACCOUNT_COLUMNS} FROM accounts ORDER BY created_at, id"
        ).fetchall()
        return [Account.from_row(row) for row in rows]

    def username_by_email(self, email) -> Optional[str]:
        row = self.database.open().execute(
            "SELECT username FROM accounts WHERE email = ?", (normalize_email(email),)
        ).fetchone()
        return row["username"] if row else None

    def _start_session(self, account: Account) -> Session:
        session = Session(account=account, email=account.email)
        self.sessions.store(session)
        return session

    def _sync_account(self, row):
        if self.sync is not None:
            self.sync.sync_account_on_auth(dict(row))
