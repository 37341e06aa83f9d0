from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Sequence


FIELD_ORDER: tuple[str, ...] = (
    "industry",
    "country",
    "role",
    "job_description",
    "prediction_date",
    "confidence",
    "replacement_technology",
    "transferable_skills",
    "future_job",
    "steps_to_start",
)

SHEET_HEADERS: tuple[str, ...] = (
    "Industry",
    "Country",
    "Role",
    "Description",
    "Prediction Date",
    "Confidence",
    "Replacement Tech",
    "Transferable Skills",
    "Future Job",
    "Steps to Start",
    "Last Updated",
)

LAST_UPDATED_COLUMN = len(FIELD_ORDER)


def _norm(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def split_skills(text: str | None) -> list[str]:
    if not text:
        return []
    return [part.strip() for part in str(text).split(",") if part.strip()]


def join_skills(skills: Sequence[str]) -> str:
    return ", ".join(s.strip() for s in skills if s and s.strip())


@dataclass(slots=True, frozen=True)
class JobInput:
    industry: str
    country: str
    role: str

    def key(self) -> tuple[str, str, str]:
        return (_norm(self.industry), _norm(self.country), _norm(self.role))

    def matches(self, industry: Any, country: Any, role: Any) -> bool:
        return self.key() == (_norm(industry), _norm(country), _norm(role))


@dataclass(slots=True)
class Prediction:
    industry: str
    country: str
    role: str
    job_description: str = ""
    prediction_date: str = ""
    confidence: str = ""
    replacement_technology: str = ""
    transferable_skills: list[str] = field(default_factory=list)
    future_job: str = ""
    steps_to_start: str = ""

    def to_values(self) -> list[str]:
        """Flatten to the ten sheet/CSV cells, joining skills into one string."""
        values: list[str] = []
        for name in FIELD_ORDER:
            value = getattr(self, name)
            if name == "transferable_skills":
                value = join_skills(value)
            values.append("" if value is None else str(value))
        return values

    @classmethod
    def from_values(cls, values: Sequence[Any]) -> "Prediction":
        cells = ["" if v is None else str(v) for v in list(values)[: len(FIELD_ORDER)]]
        cells += [""] * (len(FIELD_ORDER) - len(cells))
        data = dict(zip(FIELD_ORDER, cells))
        data["transferable_skills"] = split_skills(data["transferable_skills"])
        return cls(**data)


@dataclass(slots=True)
class CacheRow:
    prediction: Prediction
    # Raw "Last Updated" cell; an empty string means the row has never been dated.
    last_updated: str = ""

    @classmethod
    def stamped(cls, prediction: Prediction, today: date | None = None) -> "CacheRow":
        return cls(prediction=prediction, last_updated=(today or date.today()).isoformat())

    def to_values(self) -> list[str]:
        return [*self.prediction.to_values(), self.last_updated]

    @classmethod
    def from_values(cls, values: Sequence[Any]) -> "CacheRow":
        cells = list(values)
        raw = cells[LAST_UPDATED_COLUMN] if len(cells) > LAST_UPDATED_COLUMN else ""
        return cls(
            prediction=Prediction.from_values(cells),
            last_updated="" if raw is None else str(raw).strip(),
        )


@dataclass(slots=True)
class SearchResult:
    row: CacheRow
    row_index: int
    is_stale: bool

    @property
    def prediction(self) -> Prediction:
        return self.row.prediction


class CacheStatus(str, Enum):
    HIT = "hit"
    REFRESHED = "stale_updated"
    NONE = "none"


@dataclass(slots=True)
class FlowResult:
    predictions: list[Prediction]
    cache_status: CacheStatus = CacheStatus.NONE
