"""
Pytest configuration and shared fixtures.

The settings module reads the environment at import, so the test database
and token fallback are pinned here before anything from metaextract loads.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FACEBOOK_ACCESS_TOKEN"] = ""

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from metaextract.core.database import Base
from metaextract.models import ExtractionHistory, OAuthToken, SavedReportTemplate  # noqa: F401
from metaextract.services.extraction.history import ExtractionHistoryRepository
from metaextract.services.extraction.templates import ReportTemplateRepository
from metaextract.services.facebook.fb_api import FacebookAPI

GRAPH_URL = "https://graph.test/v19.0"


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers every requested delay"""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds: float):
        self.calls.append(seconds)


@pytest.fixture
def session_factory():
    """In-memory database shared by every session the factory opens"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def history(session_factory):
    return ExtractionHistoryRepository(session_factory)


@pytest.fixture
def templates(session_factory):
    return ReportTemplateRepository(session_factory)


@pytest.fixture
def sleeps():
    return SleepRecorder()


@pytest.fixture
def make_api(sleeps):
    """
    Build a FacebookAPI whose requests go to ``handler`` instead of the network.

    ``handler`` receives the httpx.Request and returns an httpx.Response
    (or raises an httpx transport error).
    """

    def _make(handler, **kwargs) -> FacebookAPI:
        options = {
            "access_token": "test-token",
            "base_url": GRAPH_URL,
            "request_delay": 0.5,
            "retry_delay": 2.0,
            "max_retries": 3,
            "sleep": sleeps,
        }
        options.update(kwargs)
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return FacebookAPI(client=client, **options)

    return _make
