import logging
import sqlite3
from typing import List

from .. import ids
from ..errors import AlreadySaved, StorageFailure, ValidationFailed
from ..models import LocationSnapshot, Result, SavedLocation

logger = logging.getLogger(__name__)


class SavedLocationRepository:
    def __init__(self, database):
        self.database = database

    def save(self, account_id, location: LocationSnapshot) -> Result:
        if not account_id or not location.id or not location.name:
            return Result.fail(ValidationFailed("Account and location are required"))

        new_id = ids.saved_id()
        try:
            with self.database.transaction() as db:
                cursor = db.execute(
                    """
                    INSERT INTO saved_locations
                    (id, account_id, location_id, location_name, image_url, rating, description)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(account_id, location_id) DO NOTHING
                    """,
                    (
                        new_id,
                        account_id,
                        location.id,
                        location.name,
                        location.image_url,
                        location.rating,
                        location.description,
                    ),
                )
        except sqlite3.Error:
            logger.exception("Saving location %s failed", location.id)
            return Result.fail(StorageFailure())

        if cursor.rowcount == 0:
            return Result.fail(AlreadySaved())
        return Result.ok(id=new_id)

    def remove(self, account_id, location_id) -> Result:
        try:
            with self.database.transaction() as db:
                db.execute(
                    "DELETE FROM saved_locations WHERE account_id = ? AND location_id = ?",
                    (account_id, location_id),
                )
        except sqlite3.Error:
            logger.exception("Removing saved location %s failed", location_id)
            return Result.fail(StorageFailure())
        return Result.ok()

    def is_saved(self, account_id, location_id) -> bool:
        try:
            row = self.database.open().execute(
                "SELECT 1 FROM saved_locations WHERE account_id = ? AND location_id = ?",
                (account_id, location_id),
            ).fetchone()
        except sqlite3.Error:
            logger.exception("Saved check failed for %s", location_id)
            return False
        return row is not None

    def list_for_account(self, account_id) -> List[SavedLocation]:
        try:
            rows = self.database.open().execute(
                """
                SELECT id, account_id, location_id, location_name, image_url,
                       rating, description, saved_at
                FROM saved_locations
                WHERE account_id = ?
                ORDER BY saved_at DESC, rowid DESC
                """,
                (account_id,),
            ).fetchall()
        except sqlite3.Error:
            logger.exception("Loading saved locations failed")
            return []
        return [SavedLocation(**dict(row)) for row in rows]
