import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path

import click
from flask import current_app
from flask.cli import with_appcontext

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DB = BASE_DIR / "tourism_app.db"
SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

# Columns added after the first release; CREATE TABLE IF NOT EXISTS skips them
# on files created by older builds.
ADDED_COLUMNS = (
    ("locations", "image_url", "TEXT"),
)


class Database:
    """Owns the single connection to the embedded database file.

    The handle is created by the application factory (or a test fixture) and
    handed to every repository, so each test can use a fresh in-memory store.
    """

    def __init__(self, path=DEFAULT_DB):
        self.path = str(path)
        self._conn = None
        self._lock = threading.RLock()

    def open(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is None:
                self._conn = self._connect()
            return self._conn

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.path,
            detect_types=sqlite3.PARSE_DECLTYPES,
            check_same_thread=False,
        )
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            with open(SCHEMA_PATH, "r", encoding="utf8") as f:
                conn.executescript(f.read())
            _add_missing_columns(conn)
            conn.commit()
        except Exception:
            conn.close()
            raise
        logger.debug("Opened database %s", self.path)
        return conn

    @contextmanager
    def transaction(self):
        """Commit on success, roll back on error.

        The connection is shared by every thread of the server, so only one
        transaction may be open on it at a time.
        """
        with self._lock:
            conn = self.open()
            try:
                yield conn
            except Exception:
                conn.rollback()
                raise
            else:
                conn.commit()

    def close(self):
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def stats(self):
        db = self.open()
        counts = {}
        for key, table in (
            ("accounts", "accounts"),
            ("locations", "locations"),
            ("reviews", "visits_and_reviews"),
            ("saved", "saved_locations"),
        ):
            row = db.execute(f"SELECT COUNT(*) AS count FROM {table}").fetchone()
            counts[key] = row["count"]
        return counts

    def all_locations(self):
        rows = self.open().execute(
            """
            SELECT id, name, description, latitude, longitude, image_url, created_at
            FROM locations
            """
        ).fetchall()
        return [dict(row) for row in rows]

    def all_reviews(self):
        rows = self.open().execute(
            """
            SELECT id, account_id, location_id, rating, review_text, visited_at
            FROM visits_and_reviews
            """
        ).fetchall()
        return [dict(row) for row in rows]


def _add_missing_columns(conn):
    for table, column, declared_type in ADDED_COLUMNS:
        existing = {row["name"] for row in conn.execute(f"PRAGMA table_info({table})")}
        if column not in existing:
            logger.info("Adding column %s.%s to an older database", table, column)
            conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {declared_type}")


def get_db() -> Database:
    return current_app.extensions["tourism"].database


@click.command("init-db")
@with_appcontext
def init_db_command():
    get_db().open()
    click.echo("Initialized the database.")


@click.command("db-stats")
@with_appcontext
def db_stats_command():
    for key, count in get_db().stats().items():
        click.echo(f"{key}: {count}")


def init_app(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(db_stats_command)
