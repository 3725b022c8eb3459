from __future__ import annotations

import logging

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError

from domain.models import AssessmentContent
from domain.value_objects import RiskScore
from services.llm.ollama_client import DEFAULT_MODEL, LLMError
from services.llm.ollama_client import generate as llm_generate
from services.llm.prompts import render_score_prompt, render_summary_prompt
from services.observability.tracing import trace_llm

logger = logging.getLogger(__name__)


class _ScoreResponse(BaseModel):
    riskScore: float = Field(ge=0, le=100)
    likelihoodScore: int = Field(ge=1, le=5)
    consequenceScore: int = Field(ge=1, le=5)
    recommendations: str = ""
    regulatoryConsiderations: str = ""


def score_assessment(content: AssessmentContent) -> RiskScore:
    """Advisory risk score; the workflow never reads it."""
    prompt = render_score_prompt(content)
    text = llm_generate(prompt, model=DEFAULT_MODEL, temperature=0.2, json_mode=True)
    try:
        parsed = _ScoreResponse.model_validate_json(text)
    except SchemaError as e:
        logger.warning("risk score response did not match schema: %s", e)
        raise LLMError(f"malformed risk score response: {e}") from e

    trace_llm(
        event="assessment_score",
        input_payload={"model": DEFAULT_MODEL, "vessel": content.vessel_name},
        output_text=text,
        tags=["advisory", "score"],
    )
    return RiskScore(
        value=parsed.riskScore,
        likelihood=parsed.likelihoodScore,
        consequence=parsed.consequenceScore,
        recommendations=parsed.recommendations,
        regulatory_notes=parsed.regulatoryConsiderations,
    )


def summarize_assessment(content: AssessmentContent) -> str:
    text = llm_generate(render_summary_prompt(content), model=DEFAULT_MODEL, temperature=0.2)
    trace_llm(
        event="assessment_summary",
        input_payload={"model": DEFAULT_MODEL, "vessel": content.vessel_name},
        output_text=text,
        tags=["advisory", "summary"],
    )
    return text
