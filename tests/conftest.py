import pytest

from tourism import build_services, create_app
from tourism.models import LocationSnapshot


@pytest.fixture
def services(tmp_path):
    """Fresh in-memory database and session file for every test."""
    svc = build_services(":memory:", tmp_path / "session_store.json")
    yield svc
    svc.database.close()


@pytest.fixture
def account(services):
    result = services.accounts.sign_up("traveler@example.com", "secret1", "Traveler")
    assert result.error is None
    return result.session.account


@pytest.fixture
def snapshot():
    return LocationSnapshot(
        id="42",
        name="Bran Castle",
        image_url="https://example.com/bran.jpg",
        rating=4.7,
        description="Castle on the border of Transylvania",
    )


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "DATABASE": ":memory:",
        "SESSION_STORE": str(tmp_path / "session_store.json"),
        "SYNC_API_URL": "http://sync.invalid/api",
    })
    yield app
    app.extensions["tourism"].database.close()


@pytest.fixture
def client(app):
    return app.test_client()
