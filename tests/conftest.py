# tests/conftest.py
import pytest
from unittest.mock import MagicMock
from pathlib import Path

from report_drive.config import (
    Settings,
    get_settings,
    DEFAULT_APP_NAME,
    DEFAULT_REPORT_FOLDER_PREFIX,
    DEFAULT_ACCOUNT_FOLDER_PREFIX,
)
from report_drive.gdrive import GoogleDriveService


@pytest.fixture
def mock_settings():
    """
    Provides a mock of the application settings for testing.
    This avoids the need for environment variables during tests.
    """
    settings = MagicMock(spec=Settings)
    settings.GDRIVE_CREDENTIALS_JSON = '{"installed": {"client_id": "test_client_id", "client_secret": "test_client_secret"}}'
    settings.GDRIVE_TOKEN_JSON = '{"token": "test_token", "refresh_token": "test_refresh_token"}'
    settings.GDRIVE_TOKEN_FILE = "gdrive_token.json"
    settings.DRIVE_APP_NAME = DEFAULT_APP_NAME
    settings.REPORT_FOLDER_PREFIX = DEFAULT_REPORT_FOLDER_PREFIX
    settings.ACCOUNT_FOLDER_PREFIX = DEFAULT_ACCOUNT_FOLDER_PREFIX
    settings.LOG_LEVEL = "INFO"
    settings.BASE_DIR = Path("/tmp")
    settings.LOG_FILE = Path("/tmp/app.log")
    return settings


@pytest.fixture(autouse=True)
def patch_settings_class(monkeypatch, mock_settings, request):
    """
    Replaces the `Settings` constructor so that any `get_settings()` call
    during a test returns `mock_settings`. Tests of the Settings class itself
    opt out with the `real_settings` marker.
    """
    get_settings.cache_clear()
    if "real_settings" not in request.keywords:
        monkeypatch.setattr("report_drive.config.Settings", lambda *args, **kwargs: mock_settings)
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clear_drive_service_cache():
    """Every test starts without cached GoogleDriveService instances."""
    GoogleDriveService._instances.clear()
    yield
    GoogleDriveService._instances.clear()
