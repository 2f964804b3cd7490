import logging
from typing import Dict, List, Optional

from .. import ids

logger = logging.getLogger(__name__)

LOCATION_COLUMNS = "id, name, description, latitude, longitude, image_url, created_at"


class LocationRepository:
    """Local copy of the locations a user has interacted with.

    The location feed stays the source of truth; rows land here when a visit
    is recorded or when the sync service pulls them from the server.
    """

    def __init__(self, database):
        self.database = database

    def create(self, name, latitude, longitude, description=None, image_url=None) -> str:
        with self.database.transaction() as db:
            return ids.insert_with_retry(
                db,
                "locations",
                ids.location_id,
                """
                INSERT INTO locations (id, name, description, latitude, longitude, image_url)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (name, description, latitude, longitude, image_url),
            )

    def ensure(self, conn, location_id, name, latitude, longitude, image_url=None) -> bool:
        """Insert the row unless it is already tracked. Runs on the caller's connection."""
        cursor = conn.execute(
            """
            INSERT INTO locations (id, name, latitude, longitude, image_url)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO NOTHING
            """,
            (location_id, name, latitude, longitude, image_url),
        )
        if cursor.rowcount:
            logger.debug("Started tracking location %s locally", location_id)
        return cursor.rowcount > 0

    def get(self, location_id) -> Optional[Dict]:
        row = self.database.open().execute(
            f"SELECT {LOCATION_COLUMNS} FROM locations WHERE id = ?", (location_id,)
        ).fetchone()
        return dict(row) if row else None

    def list_all(self) -> List[Dict]:
        rows = self.database.open().execute(
            f"SELECT {LOCATION_COLUMNS} FROM locations ORDER BY name"
        ).fetchall()
        return [dict(row) for row in rows]

    def upsert_many(self, rows) -> int:
        """Insert or refresh locations coming from the server. Returns the row count."""
        count = 0
        with self.database.transaction() as db:
            for loc in rows:
                db.execute(
                    """
                    INSERT INTO locations (id, name, description, latitude, longitude, image_url, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, COALESCE(?, datetime('now')))
                    ON CONFLICT(id) DO UPDATE SET
                        name = excluded.name,
                        description = excluded.description,
                        latitude = excluded.latitude,
                        longitude = excluded.longitude,
                        image_url = COALESCE(excluded.image_url, locations.image_url)
                    """,
                    (
                        loc.get("locid") or loc["id"],
                        loc["name"],
                        loc.get("description"),
                        loc["latitude"],
                        loc["longitude"],
                        loc.get("image_url"),
                        loc.get("created_at"),
                    ),
                )
                count += 1
        return count
