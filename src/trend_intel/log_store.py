"""Spreadsheet handle and layout for the Trends log."""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

import gspread
from google.oauth2.service_account import Credentials

from .config import Settings

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
SHEET_NAME = "Trends"

HEADER_RANGE = f"{SHEET_NAME}!A1:G1"
APPEND_RANGE = f"{SHEET_NAME}!A:G"
# Column G holds the pipe-joined strategies; row 1 is the header.
STRATEGIES_RANGE = f"{SHEET_NAME}!G2:G"

HEADER: List[str] = [
    "Timestamp",
    "News Count",
    "YouTube Count",
    "Instagram Count",
    "Summary",
    "Patterns",
    "Marketing Strategies",
]
LIST_DELIMITER = " | "
RAW_INPUT = {"valueInputOption": "RAW"}


class ValuesStore(Protocol):
    """The subset of gspread.Spreadsheet used by the history reader and logger."""

    def values_get(self, range: str, params: Dict[str, Any] | None = None) -> Dict[str, Any]:
        ...

    def values_update(
        self, range: str, params: Dict[str, Any] | None = None, body: Dict[str, Any] | None = None
    ) -> Dict[str, Any]:
        ...

    def values_append(
        self, range: str, params: Dict[str, Any], body: Dict[str, Any]
    ) -> Dict[str, Any]:
        ...


def open_spreadsheet(settings: Settings) -> gspread.Spreadsheet:
    """Authorize the service account and open the configured spreadsheet."""
    creds = Credentials.from_service_account_info(
        settings.service_account_info(), scopes=SCOPES
    )
    client = gspread.authorize(creds)
    return client.open_by_key(settings.spreadsheet_id)


def store_key(settings: Settings) -> str:
    """Lock name for writers targeting the configured spreadsheet."""
    return f"log-store:{settings.spreadsheet_id}"
