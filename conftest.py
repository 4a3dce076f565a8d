import os
import shutil
import tempfile
from datetime import date

import pytest

# Create a temporary SQLite database file for the whole test session
_TEMP_DIR = tempfile.mkdtemp(prefix="paydash_tests_")
_DB_FILE = os.path.join(_TEMP_DIR, "test_paydash.db")
os.environ["PAYDASH_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["PAYDASH_ADMIN_USERNAME"] = "admin"
os.environ["PAYDASH_ADMIN_PASSWORD"] = "admin"


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Initialize a fresh temporary SQLite database for tests and clean it up after."""
    # Import after setting env vars so the app uses the temp DB
    from paydash.database import Base, engine, init_db

    Base.metadata.create_all(bind=engine)
    init_db()

    yield

    engine.dispose()
    shutil.rmtree(_TEMP_DIR, ignore_errors=True)


# Every test starts from a freshly seeded schedule with no statuses set and
# no sessions, while user accounts are preserved.
@pytest.fixture(autouse=True)
def _clean_domain_tables():
    from paydash import crud
    from paydash.config import SCHEDULE
    from paydash.database import SessionLocal

    session = SessionLocal()
    try:
        crud.reset_application_data(session, SCHEDULE)
    finally:
        session.close()


@pytest.fixture
def test_db():
    """Provide a database session for each test with automatic rollback."""
    from paydash.database import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def frozen_today():
    """Pin the dashboard's reference date to 2025-11-01."""
    from paydash.dependencies import get_today
    from paydash.main import app

    today = date(2025, 11, 1)
    app.dependency_overrides[get_today] = lambda: today
    try:
        yield today
    finally:
        app.dependency_overrides.pop(get_today, None)
