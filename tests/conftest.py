from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from domain.models import Actor, AssessmentContent, AssessmentStatus, RiskAssessment, UserRole
from domain.value_objects import RiskScore
from services.assessments import AssessmentService
from services.persistence.memory import InMemoryAssessmentStore
from services.workflow.ledger import initialize_ledger

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

SUBMITTER = Actor(id="u-sub", name="Sam Submitter", role=UserRole.SUBMITTER)
CSO = Actor(id="u-cso", name="Casey Oversight", role=UserRole.CSO_OFFICER)
SENIOR = Actor(id="u-sd", name="Sasha Director", role=UserRole.SENIOR_DIRECTOR)
DG = Actor(id="u-dg", name="Dana General", role=UserRole.DIRECTOR_GENERAL)
ADMIN = Actor(id="u-admin", name="Avery Admin", role=UserRole.ADMIN)
OUTSIDER = Actor(id="u-other", name="Other Submitter", role=UserRole.SUBMITTER)


def content_payload(**overrides) -> dict:
    data = {
        "vessel_name": "CCGS Amundsen",
        "imo_number": "7824534",
        "department": "Engine Room",
        "region": "Arctic",
        "patrol_start_date": "2025-06-01",
        "patrol_end_date": "2025-06-15",
        "voyage_details": "Arctic resupply patrol through the Northwest Passage.",
        "reason_for_request": "Second engineer position vacant for the patrol.",
        "personnel_shortages": "No certified second engineer available for this patrol.",
        "proposed_operational_deviations": "Third engineer to act up as second engineer.",
        "employee_name": "J. Tremblay",
        "certificate_held": "Third-class engineer",
        "required_certificate": "Second-class engineer",
        "individual_has_required_sea_service": "Yes",
        "crew_continuity_as_per_profile": "Yes",
        "attachments": [],
    }
    data.update(overrides)
    return data


def make_content(**overrides) -> AssessmentContent:
    return AssessmentContent.model_validate(content_payload(**overrides))


def make_assessment(
    status: AssessmentStatus = AssessmentStatus.PENDING_CREWING_STANDARDS,
    ledger=None,
    **overrides,
) -> RiskAssessment:
    data = content_payload(**overrides.pop("content", {}))
    data.update(
        id="a-1",
        reference_number="CCG-RA-2025-00001",
        status=status,
        approval_steps=ledger if ledger is not None else initialize_ledger(),
        submitted_by=SUBMITTER.name,
        submitted_by_uid=SUBMITTER.id,
        submission_date=T0,
        last_modified=T0,
        patrol_length_days=14,
    )
    data.update(overrides)
    return RiskAssessment.model_validate(data)


def stepping_clock(start: datetime = T0, step: timedelta = timedelta(seconds=1)):
    ticks = itertools.count()
    return lambda: start + step * next(ticks)


def fake_scorer(content: AssessmentContent) -> RiskScore:
    return RiskScore(
        value=62.5,
        likelihood=3,
        consequence=4,
        recommendations="Assign an experienced chief engineer as mentor.",
        regulatory_notes="MPR section 212 exemption required.",
    )


@pytest.fixture
def store() -> InMemoryAssessmentStore:
    return InMemoryAssessmentStore()


@pytest.fixture
def service(store) -> AssessmentService:
    return AssessmentService(
        store,
        scorer=fake_scorer,
        summarizer=lambda content: "Engine room shortage on an Arctic patrol.",
        clock=stepping_clock(),
    )
