"""futurework: AI job-automation predictions with a Google Sheet read-through cache."""

from .cache_flow import analyze_industry, analyze_role
from .models import CacheStatus, FlowResult, JobInput, Prediction
from .predictor import PredictionRequestor
from .sheets import SheetSession, SheetsClient

__all__ = [
    "CacheStatus",
    "FlowResult",
    "JobInput",
    "Prediction",
    "PredictionRequestor",
    "SheetSession",
    "SheetsClient",
    "analyze_industry",
    "analyze_role",
]
