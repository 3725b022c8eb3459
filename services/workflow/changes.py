"""
Content comparison between a stored assessment and an editor's revision.

Produces a ChangeSet used by the reset policy; pure and reusable for audit
diffs.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable

from domain.models import AssessmentContent, Attachment, AttachmentIn
from domain.value_objects import ChangeSet, FieldChange

# patrol_length_days is derived from the dates and deliberately absent
SUBSTANTIVE_FIELDS: tuple[str, ...] = (
    "vessel_name",
    "imo_number",
    "maritime_exemption_number",
    "department",
    "region",
    "patrol_start_date",
    "patrol_end_date",
    "voyage_details",
    "reason_for_request",
    "personnel_shortages",
    "proposed_operational_deviations",
    "employee_name",
    "certificate_held",
    "required_certificate",
    "co_dept_head_support_exemption",
    "dept_head_confident_in_individual",
    "dept_head_confidence_reason",
    "employee_familiarization_provided",
    "worked_in_department_last_12_months",
    "worked_in_department_details",
    "similar_responsibility_experience",
    "similar_responsibility_details",
    "individual_has_required_sea_service",
    "individual_working_towards_certification",
    "certification_progress_summary",
    "request_causes_vacancy_elsewhere",
    "crew_composition_sufficient_for_safety",
    "detailed_crew_competency_assessment",
    "crew_continuity_as_per_profile",
    "crew_continuity_details",
    "special_voyage_considerations",
    "reduction_in_vessel_program_requirements",
    "roc_notification_of_limitations",
)


def normalize(value: Any) -> Any:
    """None and empty strings are the same "absent" value; enums compare by value."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: normalize(v) for k, v in sorted(value.items()) if normalize(v) is not None}
    if isinstance(value, (list, tuple)):
        return [normalize(v) for v in value]
    if hasattr(value, "model_dump"):
        return normalize(value.model_dump())
    return value


def _attachment_changes(
    original: Iterable[Attachment], revised: Iterable[AttachmentIn]
) -> list[str]:
    before = list(original)
    after = list(revised)
    notes: list[str] = []
    if len(before) != len(after):
        notes.append(f"count {len(before)} -> {len(after)}")
    new_files = [a.name for a in after if a.is_new]
    if new_files:
        notes.append("added " + ", ".join(new_files))
    before_ids = {a.id for a in before}
    after_ids = {a.id for a in after if not a.is_new}
    if removed := sorted(before_ids - after_ids):
        notes.append("removed " + ", ".join(removed))
    if unknown := sorted(after_ids - before_ids):
        notes.append("unknown " + ", ".join(unknown))
    return notes


def diff_content(original: AssessmentContent, revised: AssessmentContent) -> ChangeSet:
    changes: list[FieldChange] = []
    for name in SUBSTANTIVE_FIELDS:
        before = normalize(getattr(original, name))
        after = normalize(getattr(revised, name))
        if before != after:
            changes.append(FieldChange(field=name, before=before, after=after))

    notes = _attachment_changes(original.attachments, revised.attachments)
    return ChangeSet(
        fields=tuple(changes),
        attachments_changed=bool(notes),
        attachment_notes=tuple(notes),
    )
