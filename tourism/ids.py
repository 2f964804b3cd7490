"""Primary keys for local rows.

Every id is an entity prefix followed by a random token: ``T`` accounts,
``L`` locations, ``R`` visits/reviews and ``S`` saved locations.
"""

import logging
import random
import sqlite3
import uuid

logger = logging.getLogger(__name__)

ACCOUNT_PREFIX = "T"
LOCATION_PREFIX = "L"
REVIEW_PREFIX = "R"
SAVED_PREFIX = "S"

MAX_ID_ATTEMPTS = 5


def generate_id(prefix: str) -> str:
    return f"{prefix}{uuid.uuid4().hex}"


def short_id(prefix: str) -> str:
    """Human readable id in the 1000-9999 range. Only safe with ``insert_with_retry``."""
    return f"{prefix}{random.randint(1000, 9999)}"


def account_id() -> str:
    return generate_id(ACCOUNT_PREFIX)


def review_id() -> str:
    return generate_id(REVIEW_PREFIX)


def saved_id() -> str:
    return generate_id(SAVED_PREFIX)


def location_id() -> str:
    return short_id(LOCATION_PREFIX)


def insert_with_retry(conn, table, make_id, sql, params, attempts=MAX_ID_ATTEMPTS):
    """Run an INSERT whose first parameter is a fresh id, retrying on id clashes.

    Only a primary key collision on ``table.id`` triggers a retry; any other
    constraint failure is raised to the caller.
    """
    for attempt in range(1, attempts + 1):
        new_id = make_id()
        try:
            conn.execute(sql, (new_id, *params))
            return new_id
        except sqlite3.IntegrityError as exc:
            if f"{table}.id" not in str(exc):
                raise
            logger.info("Id %s already taken in %s (attempt %d)", new_id, table, attempt)
    raise sqlite3.IntegrityError(f"could not allocate a free id for {table}")
