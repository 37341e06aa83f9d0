from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Sequence

import requests

from .config import STATE_KEY_SPREADSHEET_ID, Settings
from .errors import StoreUnavailable
from .models import SHEET_HEADERS, CacheRow
from .runtime import LocalState


logger = logging.getLogger(__name__)

LAST_COLUMN = "K"
VALUE_INPUT_OPTION = "USER_ENTERED"


@dataclass(slots=True, frozen=True)
class SheetSession:
    """An authorized Sheets session. Held in memory only, never persisted."""

    access_token: str
    obtained_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }


def _has_token(session: SheetSession | None) -> bool:
    return session is not None and bool(session.access_token)


class SheetsClient:
    """Thin wrapper over the Sheets v4 values API for the single predictions sheet.

    Every operation takes the session explicitly. Without one, reads return
    nothing and writes are skipped without touching the network. Remote failures
    are logged and swallowed here so callers behave the same with or without a
    working cache.
    """

    def __init__(self, state: LocalState, settings: Settings, http: Any = requests) -> None:
        self.state = state
        self.settings = settings
        self.http = http

    @property
    def spreadsheet_id(self) -> str | None:
        return self.state.get(STATE_KEY_SPREADSHEET_ID)

    def forget_store(self) -> None:
        self.state.remove(STATE_KEY_SPREADSHEET_ID)

    def _base(self) -> str:
        return self.settings.sheets_api_base_url.rstrip("/")

    def _values_url(self, spreadsheet_id: str, a1_range: str) -> str:
        return f"{self._base()}/{spreadsheet_id}/values/{self.settings.sheet_name}!{a1_range}"

    def _request_json(self, session: SheetSession, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self.http.request(
                method=method,
                url=url,
                headers=session.headers,
                timeout=kwargs.pop("timeout", self.settings.request_timeout),
                **kwargs,
            )
        except requests.RequestException as exc:
            raise StoreUnavailable(f"{method} {url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise StoreUnavailable(
                f"{method} {url} -> {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}

    def _append_values(self, session: SheetSession, spreadsheet_id: str, values: list[list[str]]) -> None:
        self._request_json(
            session,
            "POST",
            self._values_url(spreadsheet_id, "A1:append"),
            params={"valueInputOption": VALUE_INPUT_OPTION},
            json={"values": values},
        )

    def _create_store(self, session: SheetSession) -> str:
        payload = self._request_json(
            session,
            "POST",
            self._base(),
            json={
                "properties": {"title": self.settings.spreadsheet_title},
                "sheets": [
                    {
                        "properties": {
                            "title": self.settings.sheet_name,
                            "gridProperties": {"frozenRowCount": 1},
                        }
                    }
                ],
            },
        )
        spreadsheet_id = str(payload.get("spreadsheetId") or "")
        if not spreadsheet_id:
            raise StoreUnavailable("Spreadsheet create response did not include a spreadsheetId")

        # Persist before the header write so a failed header never orphans the sheet.
        self.state.set(STATE_KEY_SPREADSHEET_ID, spreadsheet_id)
        logger.info("Created spreadsheet %s", spreadsheet_id)
        try:
            self._append_values(session, spreadsheet_id, [list(SHEET_HEADERS)])
        except StoreUnavailable as exc:
            logger.warning("Header row for spreadsheet %s was not written: %s", spreadsheet_id, exc)
        return spreadsheet_id

    def ensure_store(self, session: SheetSession | None) -> str | None:
        if not _has_token(session):
            logger.debug("No Sheets session; not creating a store")
            return None
        existing = self.spreadsheet_id
        if existing:
            return existing
        try:
            return self._create_store(session)
        except StoreUnavailable as exc:
            logger.warning("Could not create spreadsheet: %s", exc)
            return None

    def append_rows(self, session: SheetSession | None, rows: Sequence[CacheRow]) -> bool:
        if not _has_token(session):
            logger.debug("No Sheets session; skipping append of %d row(s)", len(rows))
            return False
        if not rows:
            return False
        spreadsheet_id = self.ensure_store(session)
        if not spreadsheet_id:
            return False
        try:
            self._append_values(session, spreadsheet_id, [row.to_values() for row in rows])
        except StoreUnavailable as exc:
            logger.warning("Append to spreadsheet %s failed: %s", spreadsheet_id, exc)
            return False
        logger.info("Appended %d row(s) to spreadsheet %s", len(rows), spreadsheet_id)
        return True

    def overwrite_row(self, session: SheetSession | None, row_index: int, row: CacheRow) -> bool:
        if not _has_token(session):
            logger.debug("No Sheets session; skipping overwrite of row %s", row_index)
            return False
        spreadsheet_id = self.spreadsheet_id
        if not spreadsheet_id:
            logger.debug("No spreadsheet configured; skipping overwrite of row %s", row_index)
            return False

        a1_range = f"A{row_index}:{LAST_COLUMN}{row_index}"
        try:
            self._request_json(
                session,
                "PUT",
                self._values_url(spreadsheet_id, a1_range),
                params={"valueInputOption": VALUE_INPUT_OPTION},
                json={"values": [row.to_values()]},
            )
        except StoreUnavailable as exc:
            logger.warning("Overwrite of row %s failed: %s", row_index, exc)
            return False
        logger.info("Overwrote row %s in spreadsheet %s", row_index, spreadsheet_id)
        return True

    def fetch_all_rows(self, session: SheetSession | None) -> list[list[str]]:
        if not _has_token(session):
            return []
        spreadsheet_id = self.spreadsheet_id
        if not spreadsheet_id:
            return []

        try:
            payload = self._request_json(
                session,
                "GET",
                self._values_url(spreadsheet_id, f"A:{LAST_COLUMN}"),
            )
        except StoreUnavailable as exc:
            if exc.status_code in (403, 404):
                logger.warning("Spreadsheet %s is gone or forbidden; forgetting it", spreadsheet_id)
                self.forget_store()
            else:
                logger.warning("Reading spreadsheet %s failed: %s", spreadsheet_id, exc)
            return []

        values = payload.get("values") or []
        return [["" if cell is None else str(cell) for cell in row] for row in values if isinstance(row, list)]
