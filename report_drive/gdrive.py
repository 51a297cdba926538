# gdrive.py
import logging
import threading
import httplib2
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import set_user_agent

from .config import get_settings

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
FILE_FIELDS = "id, name, mimeType, description, parents"


def _quote(value: str) -> str:
    """Escapes a literal for use inside a single-quoted Drive query term."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GoogleDriveService:
    """
    Authenticated Google Drive client used to lay out report folders.

    Instances are cached per credential; use get_drive_service() instead of
    the constructor.
    """

    _instances: dict[Credentials, "GoogleDriveService"] = {}
    _instances_lock = threading.Lock()

    def __init__(self, credentials: Credentials):
        settings = get_settings()
        self.app_name = settings.DRIVE_APP_NAME
        self.report_folder_prefix = settings.REPORT_FOLDER_PREFIX
        self.account_folder_prefix = settings.ACCOUNT_FOLDER_PREFIX
        self._lock = threading.Lock()

        http = set_user_agent(AuthorizedHttp(credentials, http=httplib2.Http()), self.app_name)
        self._service = build("drive", "v3", http=http)
        logging.info(f"Google Drive service '{self.app_name}' initialized successfully.")

    @classmethod
    def get_drive_service(cls, credentials: Credentials) -> "GoogleDriveService":
        """
        Returns the single GoogleDriveService for the given credentials,
        creating it on first use.
        """
        drive_service = cls._instances.get(credentials)
        if drive_service is None:
            with cls._instances_lock:
                drive_service = cls._instances.get(credentials)
                if drive_service is None:
                    drive_service = cls(credentials)
                    cls._instances[credentials] = drive_service
        return drive_service

    @property
    def service(self):
        """The underlying Drive v3 resource."""
        return self._service

    def _find_folder(self, name: str, parent_id: str | None = None) -> dict | None:
        query = (
            f"name = '{_quote(name)}' and mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
        )
        if parent_id is not None:
            query += f" and '{_quote(parent_id)}' in parents"

        logging.info(f"Executing find folder query for '{name}'")
        try:
            response = (
                self._service.files()
                .list(q=query, fields=f"files({FILE_FIELDS})")
                .execute()
            )
        except HttpError as e:
            logging.error(f"Failed to search for folder '{name}': {e}")
            raise
        files = response.get("files", [])
        logging.info(f"Number of results from query: {len(files)}")
        return files[0] if files else None

    def _create_folder(self, body: dict) -> dict:
        logging.info(f"Creating folder '{body['name']}'")
        try:
            folder = (
                self._service.files()
                .create(body=body, fields=FILE_FIELDS)
                .execute()
            )
        except HttpError as e:
            logging.error(f"Failed to create folder '{body['name']}': {e}")
            raise
        logging.info(f"Created folder '{body['name']}' with ID: {folder.get('id')}")
        return folder

    def get_reports_folder(self, mcc_account_id: str) -> dict:
        """
        Gets the reports folder for a manager account, creating it if it does not exist.

        :param mcc_account_id: The manager account the folder belongs to.
        :return: The Drive file resource of the folder.
        """
        folder_name = f"{self.report_folder_prefix}: {mcc_account_id}"
        with self._lock:
            folder = self._find_folder(folder_name)
            if folder is not None:
                return folder

            return self._create_folder(
                {
                    "name": folder_name,
                    "mimeType": FOLDER_MIME_TYPE,
                    "description": "Contains AdWords Reports generated by AwReporting",
                }
            )

    def get_account_folder(self, reports_folder: dict | str, account_id: str) -> dict:
        """
        Gets the sub-folder of an account inside the reports folder, creating it if it does not exist.
        Only direct children of the reports folder are searched.

        :param reports_folder: The reports folder resource, or its ID.
        :param account_id: The account the sub-folder belongs to.
        :return: The Drive file resource of the sub-folder.
        """
        parent_id = reports_folder.get("id") if isinstance(reports_folder, dict) else reports_folder
        if not parent_id:
            raise ValueError("reports_folder must be a folder resource with an 'id' or a folder ID.")
        folder_name = f"{self.account_folder_prefix}: {account_id}"
        with self._lock:
            folder = self._find_folder(folder_name, parent_id=parent_id)
            if folder is not None:
                return folder

            return self._create_folder(
                {
                    "name": folder_name,
                    "mimeType": FOLDER_MIME_TYPE,
                    "description": f"AdWords Reports generated by AwReporting for account# {account_id}",
                    "parents": [parent_id],
                }
            )

    def get_file_by_id(self, file_id: str) -> dict:
        """
        Gets a Google Drive file by its ID.
        Raises the client's HttpError (404) if the file does not exist.
        """
        with self._lock:
            try:
                return (
                    self._service.files()
                    .get(fileId=file_id, fields=FILE_FIELDS)
                    .execute()
                )
            except HttpError as e:
                logging.error(f"Failed to get file with ID '{file_id}': {e}")
                raise
