import sys
from datetime import date
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from flask_jwt_extended import create_access_token

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from skilltrack import create_app  # noqa: E402
from skilltrack.core.auth.password import hash_password  # noqa: E402
from skilltrack.core.users.models import User, UserSharingSettings  # noqa: E402
from skilltrack.core.utils.clock import FixedClock  # noqa: E402
from skilltrack.extensions import db  # noqa: E402

# Wednesday; its week runs Monday 2026-10-12 to Sunday 2026-10-18.
TODAY = date(2026, 10, 14)


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


def _alembic_config() -> AlembicConfig:
    cfg = AlembicConfig(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "skilltrack" / "migrations"))
    cfg.set_main_option("skilltrack_env", "testing")
    return cfg


@pytest.fixture(scope="session", autouse=True)
def migrated_db():
    """Apply migrations once per session to mirror production schema."""
    cfg = _alembic_config()
    command.upgrade(cfg, "head")
    yield


@pytest.fixture()
def app(migrated_db):
    """Per-test app; every table is emptied afterwards so tests stay isolated."""
    app = create_app("testing")
    app.extensions["clock"] = FixedClock(TODAY)
    ctx = app.app_context()
    ctx.push()
    try:
        yield app
    finally:
        db.session.rollback()
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.remove()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def clock(app):
    return app.extensions["clock"]


@pytest.fixture()
def make_user(app):
    def _make(email: str = "learner@example.com", password: str = "secret123") -> User:
        user = User(
            email=email,
            password_hash=hash_password(password),
            first_name="Ada",
            last_name="Lovelace",
        )
        user.sharing_settings = UserSharingSettings()
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture()
def user(make_user):
    return make_user()


@pytest.fixture()
def other_user(make_user):
    return make_user(email="other@example.com")


@pytest.fixture()
def auth_headers(app, user):
    """JWT headers for API calls."""
    token = create_access_token(identity=str(user.id))
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "X-CSRF-Token": "test-csrf-token",
    }
