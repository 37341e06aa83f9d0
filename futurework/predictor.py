from __future__ import annotations

import logging
from typing import Any

from google import genai
from google.genai import types
from pydantic import BaseModel, ConfigDict, Field

from .config import Settings
from .errors import PredictionFailure
from .models import JobInput, Prediction, split_skills


logger = logging.getLogger(__name__)

BULK_ROLE_COUNT = 5

# Wire name -> description hint for the model.
PREDICTION_PROPERTIES: dict[str, str | None] = {
    "industry": None,
    "country": None,
    "role": None,
    "jobDescription": "A one-sentence description of the job.",
    "predictionDate": "Predicted replacement date in YYYY-MM format.",
    "confidence": "Confidence level of prediction (e.g., '85%' or 'High').",
    "replacementTechnology": "What technology or AI system will replace it.",
    "transferableSkills": "Comma-separated list of skills useful for future roles.",
    "futureJob": "A recommended job role to aim for.",
    "stepsToStart": "3 actionable steps to start transitioning into the future job.",
}


class PredictionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    industry: str
    country: str
    role: str
    job_description: str = Field(alias="jobDescription")
    prediction_date: str = Field(alias="predictionDate")
    confidence: str
    replacement_technology: str = Field(alias="replacementTechnology")
    transferable_skills: str = Field(alias="transferableSkills")
    future_job: str = Field(alias="futureJob")
    steps_to_start: str = Field(alias="stepsToStart")

    def to_prediction(self) -> Prediction:
        return Prediction(
            industry=self.industry,
            country=self.country,
            role=self.role,
            job_description=self.job_description,
            prediction_date=self.prediction_date,
            confidence=self.confidence,
            replacement_technology=self.replacement_technology,
            transferable_skills=split_skills(self.transferable_skills),
            future_job=self.future_job,
            steps_to_start=self.steps_to_start,
        )


class PredictionsEnvelope(BaseModel):
    predictions: list[PredictionPayload] | None = None


def build_response_schema() -> types.Schema:
    properties = {
        name: types.Schema(type=types.Type.STRING, description=description)
        for name, description in PREDICTION_PROPERTIES.items()
    }
    item = types.Schema(
        type=types.Type.OBJECT,
        properties=properties,
        required=list(PREDICTION_PROPERTIES),
    )
    return types.Schema(
        type=types.Type.OBJECT,
        properties={"predictions": types.Schema(type=types.Type.ARRAY, items=item)},
        required=["predictions"],
    )


def single_prompt(job_input: JobInput) -> str:
    return (
        "Analyze the following job role specifically:\n"
        f"Industry: {job_input.industry}\n"
        f"Country: {job_input.country}\n"
        f"Role: {job_input.role}\n\n"
        "Provide a detailed prediction about when this specific role might be significantly "
        "impacted or replaced by AI/automation in this specific market.\n"
        "Be realistic based on current technological trends."
    )


def bulk_prompt(industry: str) -> str:
    return (
        f'Identify {BULK_ROLE_COUNT} common job roles in the "{industry}" industry that are at high '
        "risk of automation or AI displacement in the next 10 years.\n"
        "Provide predictions for each. Assumed context is global or major tech hubs if unspecified."
    )


def parse_predictions(text: str | None) -> list[Prediction]:
    """Parse the model's JSON payload. Empty payloads yield an empty list."""
    if not text or not text.strip():
        return []
    envelope = PredictionsEnvelope.model_validate_json(text)
    return [item.to_prediction() for item in envelope.predictions or []]


class PredictionRequestor:
    def __init__(self, settings: Settings, client: Any | None = None) -> None:
        self.settings = settings
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if self.settings.google_api_key:
                self._client = genai.Client(api_key=self.settings.google_api_key)
            else:
                # Falls back to GOOGLE_API_KEY / GEMINI_API_KEY from the environment.
                self._client = genai.Client()
        return self._client

    def _generate(self, prompt: str, failure_message: str) -> list[Prediction]:
        config = types.GenerateContentConfig(
            temperature=self.settings.temperature,
            response_mime_type="application/json",
            response_schema=build_response_schema(),
        )
        try:
            response = self.client.models.generate_content(
                model=self.settings.model_name,
                contents=prompt,
                config=config,
            )
        except Exception as exc:
            logger.error("Prediction request failed: %s", exc)
            raise PredictionFailure(failure_message) from exc

        try:
            predictions = parse_predictions(getattr(response, "text", None))
        except ValueError as exc:
            logger.error("Unparsable prediction payload: %s", exc)
            raise PredictionFailure(failure_message) from exc

        logger.info("Model returned %d prediction(s)", len(predictions))
        return predictions

    def predict_single(self, job_input: JobInput) -> list[Prediction]:
        return self._generate(
            single_prompt(job_input),
            "Failed to generate prediction. Please try again.",
        )

    def predict_bulk(self, industry: str) -> list[Prediction]:
        return self._generate(bulk_prompt(industry), "Failed to generate predictions.")
