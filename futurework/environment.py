from __future__ import annotations

import importlib.util
import os
import sys

from .config import Settings


MIN_PYTHON = (3, 11)
API_KEY_ENV_VARS = ("GOOGLE_API_KEY", "GEMINI_API_KEY")


def _genai_available() -> bool:
    try:
        return importlib.util.find_spec("google.genai") is not None
    except ModuleNotFoundError:
        return False


def _has_api_key(settings: Settings | None) -> bool:
    if settings is not None and settings.google_api_key:
        return True
    return any(os.getenv(name, "").strip() for name in API_KEY_ENV_VARS)


def runtime_problems(settings: Settings | None = None) -> list[str]:
    """List everything that would stop a prediction from being requested."""
    problems: list[str] = []
    if sys.version_info < MIN_PYTHON:
        problems.append(
            f"Python {MIN_PYTHON[0]}.{MIN_PYTHON[1]}+ is required "
            f"(current: {sys.version.split()[0]})."
        )
    if not _genai_available():
        problems.append("google-genai is not installed. Install dependencies via `pip install -e .`.")
    if not _has_api_key(settings):
        problems.append(
            "No Gemini API key configured. Set GOOGLE_API_KEY (or GEMINI_API_KEY) before running a prediction."
        )
    return problems


def assert_runtime_compatibility(settings: Settings | None = None) -> None:
    if os.getenv("FUTUREWORK_SKIP_RUNTIME_CHECK", "0") == "1":
        return
    problems = runtime_problems(settings)
    if problems:
        raise RuntimeError("FutureWork cannot start:\n- " + "\n- ".join(problems))
