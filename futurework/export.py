from __future__ import annotations

import json
from typing import Any, Sequence

import pandas as pd

from .models import Prediction


CSV_FILENAME = "job_predictions.csv"
CSV_MIME = "text/csv;charset=utf-8;"

CSV_HEADERS: tuple[str, ...] = (
    "Industry",
    "Country",
    "Role",
    "One-Sentence Job Description",
    "Predicted Replacement (Year-Month)",
    "Confidence",
    "What It Will Be Replaced With",
    "Transferable Skills",
    "Job to Aim For",
    "Steps to Start",
)

TABLE_COLUMNS: dict[str, str] = {
    "role": "Role",
    "industry": "Industry",
    "country": "Country",
    "job_description": "Description",
    "prediction_date": "Replacement",
    "confidence": "Confidence",
    "replacement_technology": "Replaced By",
    "transferable_skills": "Transferable Skills",
    "future_job": "Aim For",
    "steps_to_start": "Steps to Start",
}


def _quote(value: Any) -> str:
    return json.dumps("" if value is None else str(value), ensure_ascii=False)


def predictions_to_csv(predictions: Sequence[Prediction]) -> str:
    """Header line plus one JSON-quoted line per prediction, newline separated."""
    lines = [",".join(CSV_HEADERS)]
    for prediction in predictions:
        lines.append(",".join(_quote(value) for value in prediction.to_values()))
    return "\n".join(lines)


def predictions_frame(predictions: Sequence[Prediction]) -> pd.DataFrame:
    rows: list[dict[str, Any]] = []
    for prediction in predictions:
        row = {label: getattr(prediction, name) for name, label in TABLE_COLUMNS.items()}
        row["Transferable Skills"] = ", ".join(prediction.transferable_skills)
        rows.append(row)
    return pd.DataFrame(rows, columns=list(TABLE_COLUMNS.values()))
