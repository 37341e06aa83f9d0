from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any

import requests

from futurework.config import STATE_KEY_SPREADSHEET_ID, Settings
from futurework.models import SHEET_HEADERS, CacheRow, Prediction
from futurework.runtime import LocalState
from futurework.sheets import SheetSession, SheetsClient


BASE = "https://sheets.googleapis.com/v4/spreadsheets"


class FakeHttp:
    def __init__(self, responses: list[Any] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any):
        self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self.responses.pop(0) if self.responses else _response(200, {})
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _response(status: int, payload: Any = None) -> SimpleNamespace:
    return SimpleNamespace(status_code=status, text=str(payload), json=lambda: payload)


def _client(tmp_path: Path, http: FakeHttp, spreadsheet_id: str | None = None) -> SheetsClient:
    state = LocalState(tmp_path / "state.json")
    if spreadsheet_id:
        state.set(STATE_KEY_SPREADSHEET_ID, spreadsheet_id)
    return SheetsClient(state, Settings(state_path=tmp_path / "state.json"), http=http)


def _row() -> CacheRow:
    prediction = Prediction(
        industry="Tech",
        country="USA",
        role="Data Analyst",
        transferable_skills=["SQL", "Python"],
    )
    return CacheRow(prediction, "2026-10-19")


SESSION = SheetSession(access_token="tok")


def test_no_session_never_touches_network(tmp_path: Path) -> None:
    http = FakeHttp()
    client = _client(tmp_path, http, spreadsheet_id="sheet-1")

    assert client.append_rows(None, [_row()]) is False
    assert client.overwrite_row(None, 2, _row()) is False
    assert client.fetch_all_rows(None) == []
    assert client.ensure_store(None) is None
    assert client.append_rows(SheetSession(access_token=""), [_row()]) is False
    assert http.calls == []


def test_first_append_creates_store_with_header(tmp_path: Path) -> None:
    http = FakeHttp([_response(200, {"spreadsheetId": "new-id"}), _response(200, {}), _response(200, {})])
    client = _client(tmp_path, http)

    assert client.append_rows(SESSION, [_row()]) is True

    create, header, data = http.calls
    assert create["method"] == "POST"
    assert create["url"] == BASE
    sheet_props = create["json"]["sheets"][0]["properties"]
    assert sheet_props["title"] == "Predictions"
    assert sheet_props["gridProperties"] == {"frozenRowCount": 1}
    assert create["json"]["properties"]["title"] == "FutureWork AI Data"
    assert create["headers"]["Authorization"] == "Bearer tok"

    assert header["url"] == f"{BASE}/new-id/values/Predictions!A1:append"
    assert header["params"] == {"valueInputOption": "USER_ENTERED"}
    assert header["json"] == {"values": [list(SHEET_HEADERS)]}

    assert data["url"] == f"{BASE}/new-id/values/Predictions!A1:append"
    values = data["json"]["values"][0]
    assert values[:3] == ["Tech", "USA", "Data Analyst"]
    assert values[7] == "SQL, Python"
    assert values[10] == "2026-10-19"
    assert client.spreadsheet_id == "new-id"


def test_failed_header_write_keeps_new_store(tmp_path: Path) -> None:
    http = FakeHttp(
        [
            _response(200, {"spreadsheetId": "A"}),
            _response(500, "header failed"),
            _response(200, {}),
            _response(200, {}),
            _response(200, {"spreadsheetId": "B"}),
        ]
    )
    client = _client(tmp_path, http)

    assert client.append_rows(SESSION, [_row()]) is True
    assert client.spreadsheet_id == "A"
    assert client.append_rows(SESSION, [_row()]) is True

    creates = [c for c in http.calls if c["url"] == BASE]
    assert len(creates) == 1
    assert client.spreadsheet_id == "A"
    assert http.calls[-1]["url"] == f"{BASE}/A/values/Predictions!A1:append"


def test_existing_store_is_reused(tmp_path: Path) -> None:
    http = FakeHttp()
    client = _client(tmp_path, http, spreadsheet_id="sheet-1")

    assert client.ensure_store(SESSION) == "sheet-1"
    assert http.calls == []


def test_overwrite_targets_exact_row(tmp_path: Path) -> None:
    http = FakeHttp()
    client = _client(tmp_path, http, spreadsheet_id="sheet-1")

    assert client.overwrite_row(SESSION, 7, _row()) is True

    (call,) = http.calls
    assert call["method"] == "PUT"
    assert call["url"] == f"{BASE}/sheet-1/values/Predictions!A7:K7"
    assert call["params"] == {"valueInputOption": "USER_ENTERED"}
    assert len(call["json"]["values"][0]) == 11


def test_overwrite_without_store_is_skipped(tmp_path: Path) -> None:
    http = FakeHttp()
    client = _client(tmp_path, http)
    assert client.overwrite_row(SESSION, 2, _row()) is False
    assert http.calls == []


def test_fetch_reads_columns_a_to_k(tmp_path: Path) -> None:
    payload = {"values": [list(SHEET_HEADERS), ["Tech", "USA", "Analyst", None]]}
    http = FakeHttp([_response(200, payload)])
    client = _client(tmp_path, http, spreadsheet_id="sheet-1")

    rows = client.fetch_all_rows(SESSION)

    assert http.calls[0]["method"] == "GET"
    assert http.calls[0]["url"] == f"{BASE}/sheet-1/values/Predictions!A:K"
    assert rows[1] == ["Tech", "USA", "Analyst", ""]


def test_fetch_not_found_forgets_store(tmp_path: Path) -> None:
    http = FakeHttp([_response(404, {"error": "not found"})])
    client = _client(tmp_path, http, spreadsheet_id="sheet-1")

    assert client.fetch_all_rows(SESSION) == []
    assert client.spreadsheet_id is None


def test_fetch_forbidden_forgets_store(tmp_path: Path) -> None:
    http = FakeHttp([_response(403, {"error": "forbidden"})])
    client = _client(tmp_path, http, spreadsheet_id="sheet-1")

    assert client.fetch_all_rows(SESSION) == []
    assert client.spreadsheet_id is None


def test_fetch_server_error_keeps_store(tmp_path: Path) -> None:
    http = FakeHttp([_response(500, "boom")])
    client = _client(tmp_path, http, spreadsheet_id="sheet-1")

    assert client.fetch_all_rows(SESSION) == []
    assert client.spreadsheet_id == "sheet-1"


def test_write_failures_are_swallowed(tmp_path: Path) -> None:
    http = FakeHttp([_response(500, "boom"), requests.ConnectionError("offline")])
    client = _client(tmp_path, http, spreadsheet_id="sheet-1")

    assert client.append_rows(SESSION, [_row()]) is False
    assert client.overwrite_row(SESSION, 2, _row()) is False
    assert len(http.calls) == 2


def test_failed_create_leaves_no_store(tmp_path: Path) -> None:
    http = FakeHttp([_response(401, "unauthorized")])
    client = _client(tmp_path, http)

    assert client.append_rows(SESSION, [_row()]) is False
    assert client.spreadsheet_id is None
    assert len(http.calls) == 1
