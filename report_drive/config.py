from pathlib import Path
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
import logging
from functools import lru_cache

DEFAULT_APP_NAME = "AwReporting-AppEngine"
DEFAULT_REPORT_FOLDER_PREFIX = "AW Reports - AdWords generated Reports"
DEFAULT_ACCOUNT_FOLDER_PREFIX = "Account ID#"


class Settings(BaseSettings):
    """
    Centralized application configuration with type validation.
    Automatically reads variables from the environment and the token file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- Google Drive Settings ---
    GDRIVE_CREDENTIALS_JSON: Optional[str] = None
    GDRIVE_TOKEN_JSON: Optional[str] = None
    GDRIVE_TOKEN_FILE: str = "gdrive_token.json"
    DRIVE_APP_NAME: str = DEFAULT_APP_NAME

    # --- Folder naming ---
    REPORT_FOLDER_PREFIX: str = DEFAULT_REPORT_FOLDER_PREFIX
    ACCOUNT_FOLDER_PREFIX: str = DEFAULT_ACCOUNT_FOLDER_PREFIX

    LOG_LEVEL: str = "INFO"

    # --- Constants and Computed Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent

    @model_validator(mode="before")
    def clean_and_validate_folder_prefixes(cls, values):
        for key in ["REPORT_FOLDER_PREFIX", "ACCOUNT_FOLDER_PREFIX"]:
            if key not in values:
                continue
            value = values.get(key)
            if value is None or not str(value).strip():
                raise ValueError(f"{key} cannot be empty")
            values[key] = str(value).strip()
        return values

    def model_post_init(self, __context):
        """
        After initial settings are loaded from the environment,
        try to load the Drive token from the local token file as a fallback.
        """
        if self.GDRIVE_TOKEN_JSON:
            return
        token_file = self.BASE_DIR / self.GDRIVE_TOKEN_FILE
        if token_file.is_file():
            content = token_file.read_text().strip()
            if content:
                self.GDRIVE_TOKEN_JSON = content
                logging.info(f"Found Google Drive token in file: {token_file}")

    @property
    def LOG_FILE(self) -> Path:
        return self.BASE_DIR / "app.log"


@lru_cache()
def get_settings() -> Settings:
    """
    Returns a cached instance of the application settings.
    The first call to this function will initialize the settings.
    """
    return Settings()
