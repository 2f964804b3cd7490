import sqlite3
from unittest.mock import patch

import pytest

from tourism.errors import AlreadySaved
from tourism.models import LocationSnapshot


class TestSavedLocations:
    def test_save_check_remove(self, services, account, snapshot):
        saved = services.saved

        assert saved.is_saved(account.id, snapshot.id) is False
        first = saved.save(account.id, snapshot)
        assert first.success is True
        assert first.data["id"].startswith("S")
        assert saved.is_saved(account.id, snapshot.id) is True

        second = saved.save(account.id, snapshot)
        assert second.success is False
        assert second.reason == AlreadySaved.reason
        assert len(saved.list_for_account(account.id)) == 1

        assert saved.remove(account.id, snapshot.id).success is True
        assert saved.is_saved(account.id, snapshot.id) is False

    def test_remove_is_idempotent(self, services, account):
        assert services.saved.remove(account.id, "never-saved").success is True

    def test_snapshot_is_denormalized(self, services, account, snapshot):
        services.saved.save(account.id, snapshot)
        (row,) = services.saved.list_for_account(account.id)

        assert row.location_id == "42"
        assert row.location_name == "Bran Castle"
        assert row.image_url == "https://example.com/bran.jpg"
        assert row.rating == 4.7
        assert row.description.startswith("Castle")
        assert row.saved_at

    def test_list_newest_first(self, services, account):
        for i in range(3):
            services.saved.save(account.id, LocationSnapshot(id=f"loc-{i}", name=f"Place {i}"))
        ids = [s.location_id for s in services.saved.list_for_account(account.id)]
        assert ids == ["loc-2", "loc-1", "loc-0"]

    def test_saves_are_per_account(self, services, account, snapshot):
        other = services.accounts.sign_up("other@example.com", "secret1").session.account
        services.saved.save(account.id, snapshot)

        assert services.saved.save(other.id, snapshot).success is True
        assert services.saved.is_saved(other.id, snapshot.id) is True
        services.saved.remove(other.id, snapshot.id)
        assert services.saved.is_saved(account.id, snapshot.id) is True

    def test_missing_fields_rejected(self, services, account):
        result = services.saved.save(account.id, LocationSnapshot(id="", name="x"))
        assert result.reason == "validation"

    def test_unique_index_blocks_duplicates(self, services, account, snapshot):
        services.saved.save(account.id, snapshot)
        db = services.database.open()
        with pytest.raises(sqlite3.IntegrityError):
            db.execute(
                "INSERT INTO saved_locations (id, account_id, location_id, location_name) VALUES ('Sdup', ?, ?, 'x')",
                (account.id, snapshot.id),
            )
        db.rollback()

    def test_storage_failure(self, services, account, snapshot):
        with patch.object(services.database, "transaction", side_effect=sqlite3.OperationalError("locked")):
            result = services.saved.save(account.id, snapshot)
        assert result.success is False
        assert result.reason == "storage"
