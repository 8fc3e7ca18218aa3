"""
Prospect Analyzer Step Models

Pydantic models that normalize the analysis returned by the model.
Smaller and self-hosted models routinely omit fields, so every field has a
default and malformed values are coerced rather than rejected.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pipeline.core.exceptions import ParseError

SENIORITY_LEVELS = ("entry", "mid", "senior", "executive")
UNKNOWN_SENIORITY = "unknown"


def _text_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, str):
            items.append(item)
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            items.append(str(item))
    return items


class PersonalizationHook(BaseModel):
    """A concrete profile detail worth referencing in outreach."""

    hook: str = ""
    source: str = ""
    relevance: str = ""

    @field_validator("hook", "source", "relevance", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text_or_empty(v)


class ProspectAnalysis(BaseModel):
    """
    Normalized pass-1 output.

    This is the response format we ask the model for; see prompts.SYSTEM_PROMPT.
    """

    professional_summary: str = ""
    key_interests: List[str] = Field(default_factory=list)
    potential_pain_points: List[str] = Field(default_factory=list)
    personalization_hooks: List[PersonalizationHook] = Field(default_factory=list)
    recommended_angles: List[str] = Field(default_factory=list)
    seniority_level: str = UNKNOWN_SENIORITY

    @field_validator("professional_summary", mode="before")
    @classmethod
    def coerce_summary(cls, v: Any) -> str:
        return _text_or_empty(v)

    @field_validator("key_interests", "potential_pain_points", "recommended_angles", mode="before")
    @classmethod
    def coerce_string_lists(cls, v: Any) -> List[str]:
        return _string_list(v)

    @field_validator("personalization_hooks", mode="before")
    @classmethod
    def coerce_hooks(cls, v: Any) -> List[Dict[str, Any]]:
        if not isinstance(v, list):
            return []
        hooks = []
        for item in v:
            if isinstance(item, dict):
                hooks.append(item)
            elif isinstance(item, str) and item.strip():
                hooks.append({"hook": item})
        return hooks

    @field_validator("seniority_level", mode="before")
    @classmethod
    def coerce_seniority(cls, v: Any) -> str:
        if isinstance(v, str) and v.strip().lower() in SENIORITY_LEVELS:
            return v.strip().lower()
        return UNKNOWN_SENIORITY

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "professional_summary": "VP of Engineering at Datadog leading platform teams.",
                "key_interests": ["observability", "developer productivity"],
                "potential_pain_points": ["scaling on-call rotations"],
                "personalization_hooks": [
                    {
                        "hook": "Scaled the engineering team at Figma",
                        "source": "experience",
                        "relevance": "Hiring pressure maps to our onboarding product"
                    }
                ],
                "recommended_angles": ["reduce time-to-productivity for new hires"],
                "seniority_level": "executive"
            }
        }
    )


def normalize_prospect_analysis(raw: Any) -> Dict[str, Any]:
    """
    Coerce a recovered pass-1 value into the ProspectAnalysis shape.

    Raises:
        ParseError: If the value is not a JSON object at all
    """
    if not isinstance(raw, dict):
        raise ParseError(
            "AI returned invalid JSON for prospect analysis: expected an object",
            raw_text=repr(raw)
        )
    return ProspectAnalysis.model_validate(raw).model_dump()
