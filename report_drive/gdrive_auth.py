# gdrive_auth.py
import os
import json
import logging
from typing import Optional
from google_auth_oauthlib.flow import InstalledAppFlow
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from .exceptions import PermanentError

# The scope for Google Drive API
SCOPES = ["https://www.googleapis.com/auth/drive"]


def _client_secrets(credentials_data: dict) -> dict:
    # Client secrets downloaded from the console are nested under "installed" or "web".
    for key in ("installed", "web"):
        if key in credentials_data:
            return credentials_data[key]
    return credentials_data


def load_credentials(credentials_json: Optional[str], token_json: str) -> Credentials:
    """
    Builds authorized user credentials from a stored token.

    The client_id and client_secret from credentials_json, when present,
    take precedence over the ones saved in the token.
    """
    try:
        token_info = json.loads(token_json)
        credentials_data = json.loads(credentials_json) if credentials_json else {}
    except (TypeError, json.JSONDecodeError) as e:
        raise PermanentError(f"Google Drive credentials are not valid JSON: {e}") from e

    secrets = _client_secrets(credentials_data)
    if "client_id" in secrets and "client_secret" in secrets:
        token_info["client_id"] = secrets["client_id"]
        token_info["client_secret"] = secrets["client_secret"]
    else:
        logging.warning(
            "client_id or client_secret not found in GDRIVE_CREDENTIALS_JSON. Using existing from token_json if available."
        )

    try:
        return Credentials.from_authorized_user_info(info=token_info, scopes=SCOPES)
    except ValueError as e:
        raise PermanentError(f"Google Drive token is incomplete: {e}") from e


def gdrive_authenticate(token_path: str = "gdrive_token.json", credentials_path: Optional[str] = None):
    """
    Handles the OAuth 2.0 flow for Google Drive API.
    Reuses or refreshes a stored token; otherwise asks for the path to
    credentials.json and writes a new token to token_path.
    """
    creds = None

    # Check if a token file already exists
    if os.path.exists(token_path):
        with open(token_path, "r") as token_file:
            creds_data = json.load(token_file)
        creds = Credentials.from_authorized_user_info(creds_data, SCOPES)

    if creds and creds.valid:
        logging.info(f"Existing token in {token_path} is valid.")
        return creds

    if creds and creds.expired and creds.refresh_token:
        logging.info("Refreshing expired Google Drive token...")
        creds.refresh(Request())
    else:
        if credentials_path is None:
            credentials_path = input("Please enter the path to your credentials.json file: ")
        if not os.path.exists(credentials_path):
            raise PermanentError(f"The provided path to credentials.json is invalid: {credentials_path}")
        with open(credentials_path, "r") as credentials_file:
            client_config = json.load(credentials_file)

        flow = InstalledAppFlow.from_client_config(client_config, SCOPES)
        creds = flow.run_local_server(port=0)

    # Save the credentials for the next run
    with open(token_path, "w") as token_file:
        token_file.write(creds.to_json())
    logging.info(f"Token saved to {token_path}")
    return creds
