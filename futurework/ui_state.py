"""Request lifecycle for the Streamlit page.

A click only queues the request and marks the page busy. The page is then
redrawn with its buttons disabled, and the queued request runs on that redraw.
Keeping the lifecycle on a plain mapping lets it run against a dict outside
Streamlit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, MutableMapping

from .errors import PredictionFailure
from .models import CacheStatus, FlowResult, JobInput


logger = logging.getLogger(__name__)

BUSY_KEY = "busy"
PENDING_KEY = "pending_request"
GENERIC_ERROR = "Something went wrong."

STATE_DEFAULTS = {
    "sheet_session": None,
    "predictions": [],
    "cache_status": CacheStatus.NONE,
    "error": None,
    BUSY_KEY: False,
    PENDING_KEY: None,
}


@dataclass(slots=True, frozen=True)
class PendingRequest:
    kind: str  # "role" or "industry"
    job_input: JobInput | None = None
    industry: str = ""

    @classmethod
    def for_role(cls, job_input: JobInput) -> PendingRequest:
        return cls(kind="role", job_input=job_input)

    @classmethod
    def for_industry(cls, industry: str) -> PendingRequest:
        return cls(kind="industry", industry=industry)


def init_state(state: MutableMapping) -> None:
    for key, value in STATE_DEFAULTS.items():
        state.setdefault(key, list(value) if isinstance(value, list) else value)


def submit_request(state: MutableMapping, request: PendingRequest) -> bool:
    """Queue a request unless one is already in flight."""
    if state.get(BUSY_KEY):
        logger.info("Ignoring %s request while another is running", request.kind)
        return False
    state[BUSY_KEY] = True
    state[PENDING_KEY] = request
    state["error"] = None
    state["predictions"] = []
    state["cache_status"] = CacheStatus.NONE
    return True


def run_pending(state: MutableMapping, execute: Callable[[PendingRequest], FlowResult]) -> bool:
    """Run the queued request, if any, and store its outcome. Always clears busy."""
    request = state.get(PENDING_KEY)
    if request is None:
        # Busy without a queued request means an earlier run was cut short.
        state[BUSY_KEY] = False
        return False
    state[PENDING_KEY] = None
    try:
        result = execute(request)
    except PredictionFailure as exc:
        state["error"] = str(exc) or GENERIC_ERROR
    else:
        state["predictions"] = result.predictions
        state["cache_status"] = result.cache_status
    finally:
        state[BUSY_KEY] = False
    return True
