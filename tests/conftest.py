import os

# must be set before app.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TRANSCRIPTION_BACKEND"] = "browser"
os.environ["ELEVENLABS_API_KEY"] = ""

import pytest
from sqlalchemy.orm import sessionmaker

from app.main import app
from app.db.base import Base
from app.db.session import engine, get_db
from app.core.builders import BuilderRegistry, get_registry
from app.services.speech import BrowserTranscriptRecognizer

TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture(autouse=True)
def create_test_schema():
    """
    In-memory sqlite on one shared connection; every test gets a fresh schema.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def registry():
    return BuilderRegistry(transcriber_factory=BrowserTranscriptRecognizer, feedback=False)


@pytest.fixture(autouse=True)
def override_dependencies(db_session, registry):
    def _get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_override
    app.dependency_overrides[get_registry] = lambda: registry
    yield
    app.dependency_overrides.clear()
