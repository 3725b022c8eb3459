"""
Prompt snippets for the advisory scoring calls.
The LLM call itself lives in services.llm.ollama_client.
"""

from __future__ import annotations

from domain.models import AssessmentContent

RISK_SCORER_SYS = (
    "You are an assistant evaluating crewing risk assessments for a coast guard fleet, "
    "following ISO 31000 risk management principles. Consider the SOLAS convention and "
    "the Marine Personnel Regulations in every answer. Reply with JSON only."
)

SUMMARY_SYS = (
    "You are a senior marine personnel reviewer. Summarize the risk assessment for an "
    "approving director: the vessel, the shortage, the proposed deviation and the main "
    "risk. Be concise (<=120 words). No fluff."
)

SCORE_SCHEMA_HINT = """
Return a JSON object with exactly these keys:
- "riskScore": number 0-100 (0 minimal, 100 maximum risk)
- "likelihoodScore": integer 1-5 (1=Rare ... 5=Almost Certain)
- "consequenceScore": integer 1-5 (1=Insignificant ... 5=Catastrophic)
- "recommendations": string, mitigations for the identified risks
- "regulatoryConsiderations": string, referencing SOLAS and the Marine Personnel Regulations
""".strip()


def render_assessment(content: AssessmentContent) -> str:
    vessel = content.vessel_name
    if content.region:
        vessel += f" ({content.region.value})"
    lines = [
        f"Vessel: {vessel}",
        f"IMO number: {content.imo_number}" if content.imo_number else "",
        f"Voyage: {content.voyage_details}",
        f"Reason for request: {content.reason_for_request}",
        f"Personnel shortages: {content.personnel_shortages}",
        f"Operational deviations: {content.proposed_operational_deviations}",
        f"Crew competency: {content.detailed_crew_competency_assessment}"
        if content.detailed_crew_competency_assessment
        else "",
        "Attached documents: " + ", ".join(a.name for a in content.attachments)
        if content.attachments
        else "",
    ]
    return "\n".join(line for line in lines if line)


def render_score_prompt(content: AssessmentContent) -> str:
    return (
        f"<system>\n{RISK_SCORER_SYS}\n</system>\n"
        f"<user>\n{render_assessment(content)}\n\n{SCORE_SCHEMA_HINT}\n</user>"
    )


def render_summary_prompt(content: AssessmentContent) -> str:
    return f"<system>\n{SUMMARY_SYS}\n</system>\n<user>\n{render_assessment(content)}\n</user>"
