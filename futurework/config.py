from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


SHEETS_API_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"
SHEETS_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/spreadsheets",)

STATE_KEY_CLIENT_ID = "google_client_id"
STATE_KEY_SPREADSHEET_ID = "futurework_spreadsheet_id"


@dataclass(slots=True)
class Settings:
    state_path: Path
    model_name: str = "gemini-2.5-flash"
    temperature: float = 0.7
    google_api_key: str | None = None
    spreadsheet_title: str = "FutureWork AI Data"
    sheet_name: str = "Predictions"
    request_timeout: int = 60
    oauth_client_secret: str | None = None
    sheets_api_base_url: str = SHEETS_API_BASE_URL
