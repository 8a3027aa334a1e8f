"""Shared pytest fixtures for the Clipbook Dialer tests."""
import sys
sys.dont_write_bytecode = True

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from api.main import create_app  # noqa: E402
from clipbook.calls import CallRecordService  # noqa: E402
from clipbook.config import Settings  # noqa: E402
from clipbook.hubspot.client import HubSpotClient  # noqa: E402

from helpers import FIXED_NOW, FakeHubSpot  # noqa: E402


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        HUBSPOT_API_KEY="test-token",
        HUBSPOT_BASE_URL="https://hubspot.test",
        STATIC_DIR="does-not-exist",
    )


@pytest.fixture
def fake_hubspot():
    return FakeHubSpot()


@pytest.fixture
def hubspot(settings, fake_hubspot):
    return HubSpotClient(settings, transport=fake_hubspot.transport)


@pytest.fixture
def service(hubspot):
    return CallRecordService(hubspot, clock=lambda: FIXED_NOW)


@pytest.fixture
def client(settings, fake_hubspot):
    app = create_app(settings, transport=fake_hubspot.transport)
    return TestClient(app)
