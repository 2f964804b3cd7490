import json
import logging
import sqlite3
from datetime import datetime, timezone

import requests

from ..models import Result

logger = logging.getLogger(__name__)

SYNC_ENABLED_KEY = "@sync_enabled"
LAST_SYNC_KEY = "@last_sync"
DEFAULT_BASE_URL = "http://localhost:3000/api"


class SyncClient:
    """Best-effort replication of local rows to the shared server.

    Nothing here raises: every call reports ``{"data": ...}`` or
    ``{"error": ...}`` and local writes never wait on or roll back because
    of the server.
    """

    def __init__(self, storage, base_url=DEFAULT_BASE_URL, timeout=10, http=None):
        self.storage = storage
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()

    def _call(self, method, endpoint, payload=None):
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.http.request(
                method,
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning("Sync call %s %s failed: %s", method, endpoint, e)
            return {"error": str(e) or "Network error"}

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            error = data.get("error") if isinstance(data, dict) else None
            return {"error": error or f"HTTP error: {response.status_code}"}
        return {"data": data}

    # --- flag & bookkeeping ---

    def set_sync_enabled(self, enabled: bool):
        self.storage.set_item(SYNC_ENABLED_KEY, json.dumps(bool(enabled)))

    def is_sync_enabled(self) -> bool:
        raw = self.storage.get_item(SYNC_ENABLED_KEY)
        if raw is None:
            return False
        try:
            return json.loads(raw) is True
        except ValueError:
            return False

    def last_sync_time(self):
        raw = self.storage.get_item(LAST_SYNC_KEY)
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    def _mark_synced(self):
        self.storage.set_item(LAST_SYNC_KEY, datetime.now(timezone.utc).isoformat())

    def is_server_available(self) -> bool:
        return "error" not in self._call("GET", "/health")

    # --- single-row pushes ---

    def push_account(self, account):
        return self._call(
            "POST",
            "/sync/account",
            {
                "accid": account["id"],
                "username": account["username"],
                "email": account["email"],
                "password_hash": account["password_hash"],
                "created_at": account["created_at"],
            },
        )

    def push_location(self, location):
        return self._call(
            "POST",
            "/sync/location",
            {
                "locid": location["id"],
                "name": location["name"],
                "description": location.get("description"),
                "latitude": location["latitude"],
                "longitude": location["longitude"],
                "image_url": location.get("image_url"),
                "rating": location.get("rating", 0),
                "created_at": location.get("created_at"),
            },
        )

    def push_review(self, review):
        return self._call(
            "POST",
            "/sync/review",
            {
                "revid": review["id"],
                "account_id": review["account_id"],
                "location_id": review["location_id"],
                "rating": review["rating"],
                "review_text": review.get("review_text"),
                "visited_at": review.get("visited_at"),
            },
        )

    # --- bulk sync ---

    def _precheck(self):
        if not self.is_sync_enabled():
            return Result(success=False, error="Sync is disabled", reason="disabled")
        if not self.is_server_available():
            return Result(success=False, error="Server unavailable", reason="unavailable")
        return None

    def sync_all_to_server(self, database) -> Result:
        blocked = self._precheck()
        if blocked:
            return blocked

        try:
            accounts = database.open().execute(
                "SELECT id, username, email, password_hash, created_at FROM accounts"
            ).fetchall()
            locations = database.all_locations()
            reviews = database.all_reviews()
        except sqlite3.Error as e:
            logger.exception("Reading local rows for sync failed")
            return Result(success=False, error=str(e), reason="storage")

        failures = 0
        for account in accounts:
            failures += "error" in self.push_account(dict(account))
        for location in locations:
            failures += "error" in self.push_location(location)
        for review in reviews:
            failures += "error" in self.push_review(review)

        self._mark_synced()
        if failures:
            logger.warning("%d rows failed to sync", failures)
        return Result.ok(failed=failures)

    def sync_from_server(self, locations) -> Result:
        blocked = self._precheck()
        if blocked:
            return blocked

        response = self._call("GET", "/locations")
        if "error" in response:
            return Result(success=False, error=response["error"], reason="remote")

        rows = response["data"] or []
        try:
            count = locations.upsert_many(rows)
        except (sqlite3.Error, KeyError, TypeError) as e:
            logger.exception("Storing pulled locations failed")
            return Result(success=False, error=str(e), reason="storage")
        self._mark_synced()
        return Result.ok(pulled=count)

    def sync_account_on_auth(self, account):
        # Auth must work even when the server is down
        try:
            if self.is_sync_enabled() and self.is_server_available():
                self.push_account(account)
        except Exception:
            logger.exception("Syncing account %s failed", account.get("id"))
