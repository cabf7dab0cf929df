"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a storage backend because:
1. The snapshot survives a lost or wiped laptop
2. No database setup required
3. The user can inspect (and back up) the raw data directly

The worksheet is a tiny key/value table:

    key | value | updated_at

TRADEOFFS:
- A single cell holds at most 50,000 characters, which caps the
  snapshot size (plenty for a personal ledger, but checked on write)
- No transactions: a write replaces the value cell in one API call
- Writes are attempted once; only the connection is retried
"""

from datetime import datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.config.settings import GoogleSheetsSettings
from src.services.storage.interface import (
    ConnectionError,
    StateStorageInterface,
    StorageError,
)


STATE_COLUMNS = ["key", "value", "updated_at"]

# Google Sheets per-cell character limit
MAX_CELL_CHARS = 50_000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_state_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value state worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.state_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.state_sheet_name,
                rows=10,
                cols=len(STATE_COLUMNS),
            )
            sheet.append_row(STATE_COLUMNS)
        return sheet


class GoogleSheetsStateStorage(StateStorageInterface):
    """
    Google Sheets implementation of state storage.

    Each key is one row; the snapshot lives in the value column.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet: gspread.Worksheet, key: str) -> Optional[int]:
        """1-based row index of the key, skipping the header row."""
        keys = sheet.col_values(1)
        for idx, value in enumerate(keys[1:], start=2):
            if value == key:
                return idx
        return None

    def read(self, key: str) -> Optional[str]:
        try:
            sheet = self._client.get_state_sheet()
            row_idx = self._find_row(sheet, key)
            if row_idx is None:
                return None
            value = sheet.cell(row_idx, 2).value
            return value or None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read state: {e}")

    def write(self, key: str, blob: str) -> None:
        if len(blob) > MAX_CELL_CHARS:
            raise StorageError(
                f"State snapshot is {len(blob)} characters; "
                f"Google Sheets cells hold at most {MAX_CELL_CHARS}"
            )

        updated_at = datetime.now(timezone.utc).isoformat()
        try:
            sheet = self._client.get_state_sheet()
            row_idx = self._find_row(sheet, key)
            if row_idx is None:
                sheet.append_row([key, blob, updated_at], value_input_option="RAW")
            else:
                sheet.update(
                    range_name=f"B{row_idx}:C{row_idx}",
                    values=[[blob, updated_at]],
                    value_input_option="RAW",
                )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save state: {e}")
