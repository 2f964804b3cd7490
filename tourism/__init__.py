import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from . import database
from .services.accounts import AccountRepository
from .services.locations import LocationRepository
from .services.saved_locations import SavedLocationRepository
from .services.sync_service import DEFAULT_BASE_URL, SyncClient
from .services.visits import VisitRepository
from .sessions import SessionStore, SessionVerifier
from .storage import JsonFileStorage


@dataclass
class Services:
    """Everything the blueprints and CLI need, built once per app."""

    database: database.Database
    storage: JsonFileStorage
    sessions: SessionStore
    verifier: SessionVerifier
    sync: SyncClient
    accounts: AccountRepository
    locations: LocationRepository
    saved: SavedLocationRepository
    visits: VisitRepository


def build_services(db_path, store_path, sync_url=DEFAULT_BASE_URL, sync_timeout=10) -> Services:
    db = database.Database(db_path)
    storage = JsonFileStorage(store_path)
    sessions = SessionStore(storage)
    sync = SyncClient(storage, base_url=sync_url, timeout=sync_timeout)
    locations = LocationRepository(db)
    return Services(
        database=db,
        storage=storage,
        sessions=sessions,
        verifier=SessionVerifier(db, sessions),
        sync=sync,
        accounts=AccountRepository(db, sessions, sync=sync),
        locations=locations,
        saved=SavedLocationRepository(db),
        visits=VisitRepository(db, locations),
    )


def create_app(test_config=None):
    """Application factory: config, local stores and blueprints."""
    load_dotenv()

    app = Flask(__name__)

    base_dir = Path(__file__).resolve().parent.parent
    app.config.from_mapping(
        DATABASE=os.getenv("TOURISM_DATABASE", str(base_dir / "tourism_app.db")),
        SESSION_STORE=os.getenv("TOURISM_SESSION_STORE", str(base_dir / "session_store.json")),
        SYNC_API_URL=os.getenv("SYNC_API_URL", DEFAULT_BASE_URL),
        SYNC_TIMEOUT=float(os.getenv("SYNC_TIMEOUT", "10")),
        MIN_PASSWORD_LENGTH=6,
        SECRET_KEY=os.getenv("APP_SECRET", "dev-secret"),
    )
    if test_config:
        app.config.update(test_config)

    if not app.debug:
        logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

    app.extensions["tourism"] = build_services(
        app.config["DATABASE"],
        app.config["SESSION_STORE"],
        sync_url=app.config["SYNC_API_URL"],
        sync_timeout=app.config["SYNC_TIMEOUT"],
    )
    database.init_app(app)

    from .blueprints.auth import auth_bp
    from .blueprints.main import main_bp
    from .blueprints.api import api_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp)

    return app
