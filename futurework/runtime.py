from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from .config import Settings


logger = logging.getLogger(__name__)


def runtime_root() -> Path:
    return Path(os.getenv("FUTUREWORK_RUNTIME_ROOT", "runtime")).resolve()


def state_path() -> Path:
    return Path(os.getenv("FUTUREWORK_STATE_PATH", str(runtime_root() / "state.json"))).resolve()


def _int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return int(default)


def _float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return float(default)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def load_settings() -> Settings:
    defaults = Settings(state_path=state_path())
    return Settings(
        state_path=defaults.state_path,
        model_name=_optional_str(os.getenv("FUTUREWORK_MODEL")) or defaults.model_name,
        temperature=_float(os.getenv("FUTUREWORK_TEMPERATURE"), defaults.temperature),
        google_api_key=_optional_str(os.getenv("GOOGLE_API_KEY")),
        spreadsheet_title=_optional_str(os.getenv("FUTUREWORK_SPREADSHEET_TITLE")) or defaults.spreadsheet_title,
        sheet_name=_optional_str(os.getenv("FUTUREWORK_SHEET_NAME")) or defaults.sheet_name,
        request_timeout=_int(os.getenv("FUTUREWORK_REQUEST_TIMEOUT"), defaults.request_timeout),
        oauth_client_secret=_optional_str(os.getenv("FUTUREWORK_OAUTH_CLIENT_SECRET")),
    )


class LocalState:
    """Small persistent key/value store for opaque strings (client id, spreadsheet id)."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(k): str(v) for k, v in payload.items() if v is not None}

    def _write(self, payload: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

    def get(self, key: str) -> str | None:
        return self._read().get(key) or None

    def set(self, key: str, value: str) -> None:
        payload = self._read()
        payload[key] = str(value)
        self._write(payload)

    def remove(self, key: str) -> None:
        payload = self._read()
        if payload.pop(key, None) is not None:
            self._write(payload)
