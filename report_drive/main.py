# main.py
import argparse
import json
import logging
import sys
from typing import Optional

from googleapiclient.errors import HttpError

from .config import get_settings
from .exceptions import PermanentError
from .gdrive import GoogleDriveService
from .gdrive_auth import gdrive_authenticate, load_credentials


def setup_logging():
    """Configures logging to file and console explicitly."""
    settings = get_settings()
    log_level_name = settings.LOG_LEVEL.upper()

    # Get the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_name)

    # Clear any existing handlers to prevent duplicate logs on re-runs
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    try:
        file_handler = logging.FileHandler(settings.LOG_FILE)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except IOError as e:
        # Log to console if file logging fails (e.g., permissions)
        root_logger.error(f"Failed to set up file logging to {settings.LOG_FILE}: {e}")

    # Reducing "noise" from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


def initialize_drive_service(settings) -> Optional[GoogleDriveService]:
    """Loads the stored credentials and returns the cached GoogleDriveService for them."""
    if not settings.GDRIVE_TOKEN_JSON:
        logging.critical(
            "No Google Drive token found. Set GDRIVE_TOKEN_JSON or run the 'auth' command first."
        )
        return None
    try:
        credentials = load_credentials(
            settings.GDRIVE_CREDENTIALS_JSON, settings.GDRIVE_TOKEN_JSON
        )
    except PermanentError as e:
        logging.critical(f"Could not load Google Drive credentials. Error: {e}")
        return None
    return GoogleDriveService.get_drive_service(credentials)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Find or create Google Drive folders for generated reports."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    auth_parser = subparsers.add_parser("auth", help="Authorize access to Google Drive.")
    auth_parser.add_argument("--credentials", help="Path to the OAuth client credentials.json file.")

    reports_parser = subparsers.add_parser(
        "reports-folder", help="Get or create the reports folder of a manager account."
    )
    reports_parser.add_argument("mcc_account_id")

    account_parser = subparsers.add_parser(
        "account-folder", help="Get or create the sub-folder of an account."
    )
    account_parser.add_argument("mcc_account_id")
    account_parser.add_argument("account_id")

    file_parser = subparsers.add_parser("get-file", help="Get a file by its ID.")
    file_parser.add_argument("file_id")
    return parser


def run(args) -> int:
    settings = get_settings()

    if args.command == "auth":
        token_path = settings.BASE_DIR / settings.GDRIVE_TOKEN_FILE
        try:
            gdrive_authenticate(str(token_path), credentials_path=args.credentials)
        except PermanentError as e:
            logging.critical(f"Authorization failed. Error: {e}")
            return 1
        return 0

    drive_service = initialize_drive_service(settings)
    if drive_service is None:
        return 1

    try:
        if args.command == "reports-folder":
            result = drive_service.get_reports_folder(args.mcc_account_id)
        elif args.command == "account-folder":
            reports_folder = drive_service.get_reports_folder(args.mcc_account_id)
            result = drive_service.get_account_folder(reports_folder, args.account_id)
        else:
            result = drive_service.get_file_by_id(args.file_id)
    except HttpError as e:
        logging.error(f"Google Drive request failed: {e}", exc_info=True)
        return 1
    except Exception as e:
        # Expired tokens and network failures surface from the transport, not as HttpError.
        logging.critical(f"Could not complete the Google Drive request. Error: {e}", exc_info=True)
        return 1

    print(json.dumps(result, indent=2))
    return 0


def main(argv=None):
    args = _build_parser().parse_args(argv)
    setup_logging()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
