"""Read-through cache over the predictions sheet.

A single-role request moves through Searching -> {fresh hit, stale hit, miss}
-> Predicting -> Persisting. Fresh hits never reach the model. Stale hits are
refreshed in place at their sheet row; misses are appended. Bulk requests skip
the lookup and always append.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Sequence

import pandas as pd

from .models import CacheRow, CacheStatus, FlowResult, JobInput, SearchResult
from .predictor import PredictionRequestor
from .sheets import SheetSession, SheetsClient


logger = logging.getLogger(__name__)

STALE_AFTER = pd.DateOffset(months=1)

# Shapes a "Last Updated" cell may take: our own ISO stamp, an ISO timestamp,
# or the sheet's US-locale rendering of a USER_ENTERED date.
DATE_FORMATS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\d{4}-\d{2}-\d{2}"), "%Y-%m-%d"),
    (re.compile(r"\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?"), "ISO8601"),
    (re.compile(r"\d{1,2}/\d{1,2}/\d{4}"), "%m/%d/%Y"),
)


def _now(now: datetime | None) -> pd.Timestamp:
    stamp = pd.Timestamp(now if now is not None else datetime.now())
    # Stored dates carry no zone; compare on naive wall-clock time.
    return stamp.tz_localize(None) if stamp.tzinfo is not None else stamp


def parse_last_updated(text: str | None) -> pd.Timestamp | None:
    """Parse a "Last Updated" cell. Relative words and free-form text are rejected."""
    if text is None:
        return None
    text = str(text).strip()
    for pattern, fmt in DATE_FORMATS:
        if pattern.fullmatch(text):
            parsed = pd.to_datetime(text, format=fmt, errors="coerce")
            break
    else:
        return None
    if pd.isna(parsed):
        return None
    return parsed.tz_localize(None) if parsed.tzinfo is not None else parsed


def is_stale(last_updated: str | None, now: datetime | None = None) -> bool:
    parsed = parse_last_updated(last_updated)
    if parsed is None:
        return True
    return parsed < _now(now) - STALE_AFTER


def find_match(
    rows: Sequence[Sequence[str]],
    job_input: JobInput,
    now: datetime | None = None,
) -> SearchResult | None:
    """Return the first data row (row 1 is the header) matching the input triple."""
    if len(rows) < 2:
        return None
    for offset, values in enumerate(rows[1:], start=1):
        if len(values) < 3:
            continue
        if not job_input.matches(values[0], values[1], values[2]):
            continue
        row = CacheRow.from_values(values)
        return SearchResult(
            row=row,
            row_index=offset + 1,
            is_stale=is_stale(row.last_updated, now),
        )
    return None


def search_cache(
    client: SheetsClient,
    session: SheetSession | None,
    job_input: JobInput,
    now: datetime | None = None,
) -> SearchResult | None:
    rows = client.fetch_all_rows(session)
    return find_match(rows, job_input, now)


def analyze_role(
    job_input: JobInput,
    requestor: PredictionRequestor,
    client: SheetsClient,
    session: SheetSession | None,
    *,
    now: datetime | None = None,
) -> FlowResult:
    row_to_update: int | None = None

    if session is not None:
        logger.debug("Searching cache for %s", job_input.key())
        match = search_cache(client, session, job_input, now)
        if match is not None and not match.is_stale:
            logger.info("Fresh cache hit at row %d", match.row_index)
            return FlowResult(predictions=[match.prediction], cache_status=CacheStatus.HIT)
        if match is not None:
            logger.info("Stale cache hit at row %d; refreshing", match.row_index)
            row_to_update = match.row_index
        else:
            logger.debug("Cache miss for %s", job_input.key())
    else:
        logger.debug("Caching disabled; querying the model directly")

    predictions = requestor.predict_single(job_input)
    status = CacheStatus.NONE

    if session is not None and predictions:
        today = _today(now)
        if row_to_update is not None:
            client.overwrite_row(session, row_to_update, CacheRow.stamped(predictions[0], today))
            status = CacheStatus.REFRESHED
        else:
            client.append_rows(session, [CacheRow.stamped(p, today) for p in predictions])

    return FlowResult(predictions=predictions, cache_status=status)


def analyze_industry(
    industry: str,
    requestor: PredictionRequestor,
    client: SheetsClient,
    session: SheetSession | None,
    *,
    now: datetime | None = None,
) -> FlowResult:
    predictions = requestor.predict_bulk(industry)
    if session is not None and predictions:
        today = _today(now)
        client.append_rows(session, [CacheRow.stamped(p, today) for p in predictions])
    return FlowResult(predictions=predictions, cache_status=CacheStatus.NONE)


def _today(now: datetime | None) -> date:
    return _now(now).date()
