"""Tests for visits, reviews and profile stats."""

import pytest

COORDS = {"latitude": 45.515, "longitude": 25.367}


def visit(services, account, location_id, rating=4, text=None, name=None, image=None):
    return services.visits.save_visit_and_review(
        account.id,
        location_id,
        name or f"Place {location_id}",
        image,
        rating,
        text,
        **COORDS,
    )


class TestSaveVisit:
    def test_first_visit_creates_row_and_location(self, services, account):
        result = visit(services, account, "42", rating=3, name="Bran Castle")

        assert result.success is True
        assert result.data["id"].startswith("R")
        assert services.visits.is_visited(account.id, "42") is True

        location = services.locations.get("42")
        assert location["name"] == "Bran Castle"
        assert location["latitude"] == COORDS["latitude"]
        assert location["longitude"] == COORDS["longitude"]

    def test_revisit_updates_in_place(self, services, account):
        first = visit(services, account, "42", rating=3)
        second = visit(services, account, "42", rating=5, text="great")

        assert second.data["id"] == first.data["id"]
        visited = services.visits.list_visited(account.id)
        assert len(visited) == 1
        assert visited[0].rating == 5
        assert visited[0].review_text == "great"

    def test_existing_location_is_left_alone(self, services, account):
        services.locations.upsert_many([
            {"id": "42", "name": "Bran Castle", "latitude": 45.5, "longitude": 25.3, "description": "Castle"},
        ])
        visit(services, account, "42", name="Other name")
        location = services.locations.get("42")
        assert location["name"] == "Bran Castle"
        assert location["description"] == "Castle"

    @pytest.mark.parametrize("rating", [0, 6, -1, 2.5, "5", None, True])
    def test_invalid_rating(self, services, account, rating):
        result = visit(services, account, "42", rating=rating)
        assert result.success is False
        assert result.reason == "validation"
        assert services.visits.is_visited(account.id, "42") is False
        assert services.locations.get("42") is None

    def test_coordinates_required(self, services, account):
        result = services.visits.save_visit_and_review(
            account.id, "42", "Bran", None, 4, latitude=None, longitude=25.0
        )
        assert result.reason == "validation"

    def test_blank_review_stored_as_null(self, services, account):
        visit(services, account, "42", text="   ")
        assert services.visits.list_visited(account.id)[0].review_text is None

    def test_visit_and_location_are_atomic(self, services):
        # Unknown account: the visit insert fails its foreign key after the location insert
        class Ghost:
            id = "Tghost"

        result = visit(services, Ghost, "99")
        assert result.success is False
        assert result.reason == "storage"
        assert services.locations.get("99") is None
        assert services.database.stats()["reviews"] == 0


class TestListVisited:
    def test_newest_first(self, services, account):
        for loc in ["a", "b", "c"]:
            visit(services, account, loc)
        assert [v.location_id for v in services.visits.list_visited(account.id)] == ["c", "b", "a"]

    def test_image_comes_from_saved_snapshot(self, services, account, snapshot):
        services.saved.save(account.id, snapshot)
        visit(services, account, snapshot.id, name=snapshot.name)

        (row,) = services.visits.list_visited(account.id)
        assert row.location_name == "Bran Castle"
        assert row.image_url == snapshot.image_url

    def test_image_falls_back_to_location(self, services, account):
        visit(services, account, "7", image="https://example.com/7.jpg")
        assert services.visits.list_visited(account.id)[0].image_url == "https://example.com/7.jpg"

    def test_only_own_visits(self, services, account):
        other = services.accounts.sign_up("other@example.com", "secret1").session.account
        visit(services, other, "x")
        assert services.visits.list_visited(account.id) == []


class TestStats:
    def test_empty(self, services, account):
        stats = services.visits.stats(account.id)
        assert (stats.visited, stats.reviews) == (0, 0)

    def test_counts(self, services, account):
        texts = ["nice", None, "loved it", "", "   ", "ok"]
        for i, text in enumerate(texts):
            visit(services, account, f"loc-{i}", text=text)

        stats = services.visits.stats(account.id)
        assert stats.visited == 6
        assert stats.reviews == 3

    def test_revisit_does_not_double_count(self, services, account):
        visit(services, account, "42")
        visit(services, account, "42", text="second time")
        stats = services.visits.stats(account.id)
        assert (stats.visited, stats.reviews) == (1, 1)


class TestReviewsForLocation:
    def test_lists_reviews_with_usernames(self, services, account):
        other = services.accounts.sign_up("other@example.com", "secret1", "Other").session.account
        visit(services, account, "42", rating=5, text="great")
        visit(services, other, "42", rating=2, text="meh")

        reviews = services.visits.reviews_for_location("42")
        assert {r["username"] for r in reviews} == {"Traveler", "Other"}
        assert reviews[0]["username"] == "Other"
