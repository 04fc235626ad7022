"""AI industry insight generator.

Asks an OpenAI chat model for a JSON market snapshot of an industry and
validates it into an InsightPayload. Any failure (SDK error, timeout, empty
completion, bad JSON, schema mismatch) raises InsightGenerationError.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from openai import OpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError

from careercoach.config import Settings
from careercoach.exceptions import InsightGenerationError
from careercoach.insights.schemas import InsightPayload

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a labour-market analyst. Respond with JSON only."

INSIGHT_PROMPT_TEMPLATE = """Analyze the current state of the {industry} industry and provide insights in ONLY the following JSON format without any additional notes or explanations:
{{
  "salary_ranges": [
    {{ "role": "string", "min": number, "max": number, "median": number, "location": "string" }}
  ],
  "growth_rate": number,
  "demand_level": "HIGH" | "MEDIUM" | "LOW",
  "top_skills": ["skill1", "skill2"],
  "market_outlook": "POSITIVE" | "NEUTRAL" | "NEGATIVE",
  "key_trends": ["trend1", "trend2"],
  "recommended_skills": ["skill1", "skill2"]
}}

IMPORTANT: Return ONLY the JSON. No additional text, notes, or markdown formatting.
Include at least 5 common roles for salary ranges.
Growth rate should be a percentage.
Include at least 5 skills and trends."""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def build_prompt(industry: str) -> str:
    return INSIGHT_PROMPT_TEMPLATE.format(industry=industry)


def parse_insight_text(text: str) -> InsightPayload:
    """Parse model output into an InsightPayload, tolerating code fences."""
    cleaned = _FENCE_RE.sub("", text.strip()).strip()
    if not cleaned:
        raise InsightGenerationError(detail="Model returned an empty completion")

    try:
        data: Any = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise InsightGenerationError(detail=f"Model output is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise InsightGenerationError(
            detail=f"Expected a JSON object, got {type(data).__name__}",
        )

    try:
        return InsightPayload.model_validate(data)
    except PydanticValidationError as e:
        raise InsightGenerationError(
            detail=f"Model output failed validation: {e.error_count()} error(s)",
        ) from e


class InsightGenerator:
    """Generates industry insights with an OpenAI chat model."""

    def __init__(
        self,
        client: Optional[OpenAI] = None,
        model: str = "gpt-4o-mini",
        api_key: Optional[str] = None,
    ) -> None:
        self._client = client
        self._api_key = api_key
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "InsightGenerator":
        api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
        return cls(model=settings.insight_model, api_key=api_key)

    @property
    def client(self) -> OpenAI:
        """Lazily construct the SDK client so a missing key only fails on use."""
        if self._client is None:
            if not self._api_key:
                raise InsightGenerationError(
                    message="Insight generation is not configured",
                    detail="CAREERCOACH_OPENAI_API_KEY is not set",
                    suggestion="Set CAREERCOACH_OPENAI_API_KEY in the environment or .env",
                )
            self._client = OpenAI(api_key=self._api_key, max_retries=0)
        return self._client

    def generate(self, industry: str, timeout: Optional[float] = None) -> InsightPayload:
        """Generate an insight payload for industry.

        Args:
            industry: Industry name as entered during onboarding.
            timeout: Request timeout in seconds; the caller passes its
                remaining profile-update budget.
        """
        logger.info("Generating industry insight for %r (model=%s)", industry, self.model)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(industry)},
                ],
                response_format={"type": "json_object"},
                temperature=0.3,
                timeout=timeout,
            )
        except OpenAIError as e:
            raise InsightGenerationError(
                detail=f"{type(e).__name__}: {e}",
            ) from e

        if not response.choices:
            raise InsightGenerationError(detail="Model returned no choices")

        text = response.choices[0].message.content or ""
        return parse_insight_text(text)
