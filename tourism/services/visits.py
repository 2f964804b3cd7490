import logging
import sqlite3
from typing import Dict, List

from .. import ids
from ..errors import StorageFailure, TourismError, ValidationFailed
from ..models import Result, VisitedLocation, VisitStats
from ..utils import clean_review_text, validate_rating
from .locations import LocationRepository

logger = logging.getLogger(__name__)


class VisitRepository:
    """One visit (rating + optional review) per account and location.

    Marking a location visited again overwrites the previous rating, text
    and visit time. There is no way to un-visit a location.
    """

    def __init__(self, database, locations=None):
        self.database = database
        self.locations = locations or LocationRepository(database)

    def save_visit_and_review(
        self,
        account_id,
        location_id,
        location_name,
        image_url,
        rating,
        review_text=None,
        *,
        latitude,
        longitude,
    ) -> Result:
        try:
            if not account_id or not location_id:
                raise ValidationFailed("Account and location are required")
            if latitude is None or longitude is None:
                raise ValidationFailed("Location coordinates are required")
            rating = validate_rating(rating)
        except TourismError as exc:
            return Result.fail(exc)

        text = clean_review_text(review_text)
        try:
            with self.database.transaction() as db:
                self.locations.ensure(
                    db, location_id, location_name or location_id, latitude, longitude, image_url
                )
                db.execute(
                    """
                    INSERT INTO visits_and_reviews (id, account_id, location_id, rating, review_text)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(account_id, location_id) DO UPDATE SET
                        rating = excluded.rating,
                        review_text = excluded.review_text,
                        visited_at = datetime('now')
                    """,
                    (ids.review_id(), account_id, location_id, rating, text),
                )
                row = db.execute(
                    "SELECT id FROM visits_and_reviews WHERE account_id = ? AND location_id = ?",
                    (account_id, location_id),
                ).fetchone()
        except sqlite3.Error:
            logger.exception("Saving visit for %s failed", location_id)
            return Result.fail(StorageFailure())

        return Result.ok(id=row["id"])

    def list_visited(self, account_id) -> List[VisitedLocation]:
        try:
            rows = self.database.open().execute(
                """
                SELECT v.id, v.location_id,
                       COALESCE(l.name, s.location_name, v.location_id) AS location_name,
                       COALESCE(s.image_url, l.image_url) AS image_url,
                       v.rating, v.review_text, v.visited_at
                FROM visits_and_reviews v
                LEFT JOIN locations l ON l.id = v.location_id
                LEFT JOIN saved_locations s
                    ON s.location_id = v.location_id AND s.account_id = v.account_id
                WHERE v.account_id = ?
                ORDER BY v.visited_at DESC, v.rowid DESC
                """,
                (account_id,),
            ).fetchall()
        except sqlite3.Error:
            logger.exception("Loading visited locations failed")
            return []
        return [VisitedLocation(**dict(row)) for row in rows]

    def stats(self, account_id) -> VisitStats:
        try:
            row = self.database.open().execute(
                """
                SELECT COUNT(DISTINCT location_id) AS visited,
                       COUNT(CASE WHEN review_text IS NOT NULL AND review_text != '' THEN 1 END) AS reviews
                FROM visits_and_reviews
                WHERE account_id = ?
                """,
                (account_id,),
            ).fetchone()
        except sqlite3.Error:
            logger.exception("Loading visit stats failed")
            return VisitStats()
        return VisitStats(visited=row["visited"], reviews=row["reviews"])

    def is_visited(self, account_id, location_id) -> bool:
        try:
            row = self.database.open().execute(
                "SELECT 1 FROM visits_and_reviews WHERE account_id = ? AND location_id = ?",
                (account_id, location_id),
            ).fetchone()
        except sqlite3.Error:
            logger.exception("Visited check failed for %s", location_id)
            return False
        return row is not None

    def reviews_for_location(self, location_id) -> List[Dict]:
        rows = self.database.open().execute(
            """
            SELECT v.id, v.account_id, a.username, v.rating, v.review_text, v.visited_at
            FROM visits_and_reviews v
            JOIN accounts a ON a.id = v.account_id
            WHERE v.location_id = ?
            ORDER BY v.visited_at DESC, v.rowid DESC
            """,
            (location_id,),
        ).fetchall()
        return [dict(row) for row in rows]
