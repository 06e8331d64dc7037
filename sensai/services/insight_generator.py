"""
Industry Insight Generator

Asks the AI model for a structured market analysis of one industry and turns
the answer into a validated payload ready for storage.
"""
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from sensai.errors import AIResponseMalformedError
from sensai.models.industry_insight import DemandLevel, MarketOutlook
from sensai.services.ai_client import TextModel, complete
from sensai.utils.logger import log


INSIGHT_PROMPT_TEMPLATE = """
Analyze the current state of the {industry} industry and provide insights in ONLY the following JSON format without any additional notes or explanations:
{{
  "salaryRanges": [
    {{ "role": "string", "min": number, "max": number, "median": number, "location": "string" }}
  ],
  "growthRate": number,
  "demandLevel": "HIGH" | "MEDIUM" | "LOW",
  "topSkills": ["skill1", "skill2"],
  "marketOutlook": "POSITIVE" | "NEUTRAL" | "NEGATIVE",
  "keyTrends": ["trend1", "trend2"],
  "recommendedSkills": ["skill1", "skill2"]
}}

IMPORTANT: Return ONLY the JSON. No additional text, notes, or markdown formatting.
Use UPPERCASE values for enums (e.g. HIGH, MEDIUM, LOW).
Include at least 5 common roles for salary ranges.
Growth rate should be a percentage.
Include at least 5 skills and trends.
"""


def _normalize_enum(value: Any, default: Any) -> Any:
    """Upper-case enum strings; missing or blank values take the default."""
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip().upper()
        return value or default
    return value


class SalaryRange(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    median: Optional[float] = None
    location: Optional[str] = None


class IndustryInsightPayload(BaseModel):
    """Insight fields as returned by the model (camelCase on the wire)"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    salary_ranges: List[SalaryRange] = Field(default_factory=list, alias="salaryRanges")
    growth_rate: float = Field(default=0.0, alias="growthRate")
    demand_level: DemandLevel = Field(default=DemandLevel.MEDIUM, alias="demandLevel")
    top_skills: List[str] = Field(default_factory=list, alias="topSkills")
    market_outlook: MarketOutlook = Field(default=MarketOutlook.NEUTRAL, alias="marketOutlook")
    key_trends: List[str] = Field(default_factory=list, alias="keyTrends")
    recommended_skills: List[str] = Field(default_factory=list, alias="recommendedSkills")

    @field_validator("demand_level", mode="before")
    @classmethod
    def _normalize_demand(cls, value: Any) -> Any:
        return _normalize_enum(value, DemandLevel.MEDIUM)

    @field_validator("market_outlook", mode="before")
    @classmethod
    def _normalize_outlook(cls, value: Any) -> Any:
        return _normalize_enum(value, MarketOutlook.NEUTRAL)

    @field_validator("growth_rate", mode="before")
    @classmethod
    def _default_growth(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    def to_columns(self) -> Dict[str, Any]:
        """Column values for an IndustryInsight row."""
        return {
            "salary_ranges": [r.model_dump() for r in self.salary_ranges],
            "growth_rate": self.growth_rate,
            "demand_level": self.demand_level.value,
            "top_skills": list(self.top_skills),
            "market_outlook": self.market_outlook.value,
            "key_trends": list(self.key_trends),
            "recommended_skills": list(self.recommended_skills),
        }


def build_insight_prompt(industry: str) -> str:
    return INSIGHT_PROMPT_TEMPLATE.format(industry=industry)


def parse_insights(industry: str, text: str) -> IndustryInsightPayload:
    """
    Parse cleaned model output into a payload.

    Raises:
        AIResponseMalformedError: invalid JSON, not an object, or bad field values
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        log.error(f"Failed to parse insights for {industry}: {text[:500]!r} ({e})")
        raise AIResponseMalformedError(f"Failed to parse insights for {industry}") from e

    if not isinstance(data, dict):
        raise AIResponseMalformedError(
            f"Failed to parse insights for {industry}: expected a JSON object, got {type(data).__name__}"
        )

    try:
        return IndustryInsightPayload.model_validate(data)
    except PydanticValidationError as e:
        raise AIResponseMalformedError(
            f"Failed to parse insights for {industry}: {e.error_count()} invalid field(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e


class InsightGenerator:
    """Generates insights for an industry. No caching: every call hits the model."""

    def __init__(self, model: Optional[TextModel]):
        self.model = model

    async def generate(self, industry: str) -> IndustryInsightPayload:
        log.info(f"Generating industry insights for {industry}")
        text = await complete(
            self.model,
            build_insight_prompt(industry),
            label=f"insights[{industry}]",
        )
        payload = parse_insights(industry, text)
        log.info(
            f"Generated insights for {industry}: {len(payload.salary_ranges)} salary ranges, "
            f"demand={payload.demand_level.value}, outlook={payload.market_outlook.value}"
        )
        return payload
