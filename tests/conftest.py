import os

import pytest
from fastapi.testclient import TestClient

from tests.helpers.whatsapp import ADMIN_NUMBER

# Set test environment variables before importing app
os.environ["APP_ENV"] = "dev"
os.environ.setdefault("WHATSAPP_VERIFY_TOKEN", "test_token")
os.environ.setdefault("WHATSAPP_ACCESS_TOKEN", "test_token")
os.environ.setdefault("WHATSAPP_PHONE_NUMBER_ID", "test_id")
# Note: WHATSAPP_APP_SECRET not set by default - allows tests without signature verification
os.environ.setdefault("WHATSAPP_DRY_RUN", "true")
os.environ["ADMIN_WHATSAPP_NUMBER"] = ADMIN_NUMBER
os.environ.setdefault("DEMO_MODE", "false")  # Ensure demo mode is off in tests

from app.core.config import DEFAULT_MENU_CATALOG_PATH  # noqa: E402
from app.main import app  # noqa: E402
from app.services.dispatch import ContactStore, DispatchEngine  # noqa: E402
from app.services.menus import load_catalog  # noqa: E402
from tests.helpers.fake_sender import FakeSender  # noqa: E402


@pytest.fixture(scope="session")
def catalog():
    """The shipped menu catalog."""
    return load_catalog(DEFAULT_MENU_CATALOG_PATH)


@pytest.fixture
def engine(catalog):
    """Engine with the production routing: 3-button main menu, admin test menu."""
    return DispatchEngine(
        catalog,
        ContactStore(),
        default_menu_id="main",
        admin_address=ADMIN_NUMBER,
        admin_menu_id="admin_test",
        startup_message="FY'S PROPERTY Bot is LIVE!",
    )


@pytest.fixture
def list_engine(catalog):
    """Engine whose default menu is the list variant (includes Contact Admin and Help)."""
    return DispatchEngine(
        catalog,
        ContactStore(),
        default_menu_id="main_list",
        admin_address=ADMIN_NUMBER,
        admin_menu_id=None,
    )


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture(scope="function")
def client():
    """Test client; startup builds a fresh engine (empty contact store) per test."""
    with TestClient(app) as test_client:
        yield test_client
