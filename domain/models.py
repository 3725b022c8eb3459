from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.config import settings
from domain.value_objects import ComplianceFlags


class ApprovalLevel(str, Enum):
    CREWING_STANDARDS = "Crewing Standards and Oversight"
    SENIOR_DIRECTOR = "Senior Director"
    DIRECTOR_GENERAL = "Director General"


# canonical order; the ledger always holds exactly one step per entry
LEVEL_ORDER: Tuple[ApprovalLevel, ...] = tuple(ApprovalLevel)
FIRST_LEVEL = LEVEL_ORDER[0]


class ApprovalDecision(str, Enum):
    APPROVED = "Approved"
    REJECTED = "Rejected"
    NEEDS_INFORMATION = "Needs Information"


class AssessmentStatus(str, Enum):
    DRAFT = "Draft"
    PENDING_CREWING_STANDARDS = "Pending Crewing Standards and Oversight"
    PENDING_SENIOR_DIRECTOR = "Pending Senior Director"
    PENDING_DIRECTOR_GENERAL = "Pending Director General"
    NEEDS_INFORMATION = "Needs Information"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class UserRole(str, Enum):
    SUBMITTER = "Submitter"
    CSO_OFFICER = "CSO Officer"
    SENIOR_DIRECTOR = "Senior Director"
    DIRECTOR_GENERAL = "Director General"
    ADMIN = "Admin"


ROLE_FOR_LEVEL: dict[ApprovalLevel, UserRole] = {
    ApprovalLevel.CREWING_STANDARDS: UserRole.CSO_OFFICER,
    ApprovalLevel.SENIOR_DIRECTOR: UserRole.SENIOR_DIRECTOR,
    ApprovalLevel.DIRECTOR_GENERAL: UserRole.DIRECTOR_GENERAL,
}


class YesNo(str, Enum):
    YES = "Yes"
    NO = "No"


class VesselDepartment(str, Enum):
    NAVIGATION = "Navigation"
    DECK = "Deck"
    ENGINE_ROOM = "Engine Room"
    LOGISTICS = "Logistics"
    OTHER = "Other"


class VesselRegion(str, Enum):
    ATLANTIC = "Atlantic"
    CENTRAL = "Central"
    WESTERN = "Western"
    ARCTIC = "Arctic"
    NATIONAL_HQ = "National HQ"


class Actor(BaseModel):
    """Current user as handed over by the auth collaborator."""

    id: str
    name: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Attachment(BaseModel):
    id: str
    name: str
    url: str
    type: str = "unknown"
    size: int = 0
    uploaded_at: datetime

    @property
    def is_new(self) -> bool:
        return False


class AttachmentIn(BaseModel):
    """Attachment as submitted by an editor; no id means a newly added file."""

    id: Optional[str] = None
    name: str = Field(min_length=1)
    url: Optional[str] = None
    type: Optional[str] = None
    size: Optional[int] = None
    uploaded_at: Optional[datetime] = None

    @property
    def is_new(self) -> bool:
        return not self.id


class ApprovalStep(BaseModel):
    """
    Decision slot for one approval level.

    A step is either fully pending (only `level` set) or fully decided
    (decision, user, date and notes all set). Compliance flags only ever
    appear on a decided first-level step.
    """

    model_config = ConfigDict(frozen=True)

    level: ApprovalLevel
    decision: Optional[ApprovalDecision] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    date: Optional[datetime] = None
    notes: Optional[str] = None
    is_against_fsm: bool = False
    is_against_mpr: bool = False
    is_against_crewing_profile: bool = False

    @model_validator(mode="after")
    def _decided_or_pending(self) -> "ApprovalStep":
        audit = (self.user_id, self.user_name, self.date, self.notes)
        if self.decision is None:
            if any(v is not None for v in audit):
                raise ValueError(f"pending step for {self.level.value} carries decision metadata")
            if self.flags.any():
                raise ValueError(f"pending step for {self.level.value} carries compliance flags")
        elif any(v is None for v in audit):
            raise ValueError(f"decided step for {self.level.value} is missing audit metadata")
        if self.level != FIRST_LEVEL and self.flags.any():
            raise ValueError(f"compliance flags are only allowed on {FIRST_LEVEL.value}")
        return self

    @property
    def is_decided(self) -> bool:
        return self.decision is not None

    @property
    def flags(self) -> ComplianceFlags:
        return ComplianceFlags(
            is_against_fsm=self.is_against_fsm,
            is_against_mpr=self.is_against_mpr,
            is_against_crewing_profile=self.is_against_crewing_profile,
        )


# fixed cardinality: one slot per ApprovalLevel
Ledger = Tuple[ApprovalStep, ApprovalStep, ApprovalStep]


class AssessmentContent(BaseModel):
    """Editable content of a risk assessment (the submitter's form)."""

    # vessel identity
    vessel_name: str = Field(min_length=3, max_length=100)
    imo_number: Optional[str] = None
    maritime_exemption_number: Optional[str] = None
    department: Optional[VesselDepartment] = None
    region: Optional[VesselRegion] = None

    # voyage and personnel narrative
    patrol_start_date: Optional[date] = None
    patrol_end_date: Optional[date] = None
    voyage_details: str = Field(min_length=10, max_length=1000)
    reason_for_request: str = Field(min_length=10, max_length=1000)
    personnel_shortages: str = Field(min_length=10, max_length=2000)
    proposed_operational_deviations: str = Field(min_length=10, max_length=2000)

    # individual exemption assessment
    employee_name: Optional[str] = None
    certificate_held: Optional[str] = None
    required_certificate: Optional[str] = Field(default=None, max_length=200)
    co_dept_head_support_exemption: Optional[YesNo] = None
    dept_head_confident_in_individual: Optional[YesNo] = None
    dept_head_confidence_reason: Optional[str] = None
    employee_familiarization_provided: Optional[YesNo] = None
    worked_in_department_last_12_months: Optional[YesNo] = None
    worked_in_department_details: Optional[str] = None
    similar_responsibility_experience: Optional[YesNo] = None
    similar_responsibility_details: Optional[str] = None
    individual_has_required_sea_service: Optional[YesNo] = None
    individual_working_towards_certification: Optional[YesNo] = None
    certification_progress_summary: Optional[str] = None

    # operational considerations
    request_causes_vacancy_elsewhere: Optional[YesNo] = None
    crew_composition_sufficient_for_safety: Optional[YesNo] = None
    detailed_crew_competency_assessment: Optional[str] = None
    crew_continuity_as_per_profile: Optional[YesNo] = None
    crew_continuity_details: Optional[str] = None
    special_voyage_considerations: Optional[str] = None
    reduction_in_vessel_program_requirements: Optional[YesNo] = None
    roc_notification_of_limitations: Optional[YesNo] = None

    attachments: list[AttachmentIn] = Field(default_factory=list)

    @field_validator("attachments")
    @classmethod
    def _attachment_limit(cls, v: list) -> list:
        if len(v) > settings.MAX_ATTACHMENTS:
            raise ValueError(f"maximum of {settings.MAX_ATTACHMENTS} attachments allowed")
        return v

    @model_validator(mode="after")
    def _conditional_details(self) -> "AssessmentContent":
        required_when = [
            ("dept_head_confident_in_individual", YesNo.YES, "dept_head_confidence_reason"),
            ("worked_in_department_last_12_months", YesNo.YES, "worked_in_department_details"),
            ("similar_responsibility_experience", YesNo.YES, "similar_responsibility_details"),
            (
                "individual_working_towards_certification",
                YesNo.YES,
                "certification_progress_summary",
            ),
            ("crew_continuity_as_per_profile", YesNo.NO, "crew_continuity_details"),
        ]
        for answer_field, trigger, detail_field in required_when:
            detail = getattr(self, detail_field)
            if getattr(self, answer_field) == trigger and not (detail and detail.strip()):
                raise ValueError(f"{detail_field} is required when {answer_field} is {trigger.value}")
        if (
            self.reduction_in_vessel_program_requirements == YesNo.YES
            and self.roc_notification_of_limitations is None
        ):
            raise ValueError(
                "roc_notification_of_limitations is required when vessel program is reduced"
            )
        return self


class RiskAssessment(AssessmentContent):
    id: Optional[str] = None
    reference_number: str
    status: AssessmentStatus
    approval_steps: Ledger
    attachments: list[Attachment] = Field(default_factory=list)

    submitted_by: str
    submitted_by_uid: Optional[str] = None
    submission_date: datetime
    last_modified: Optional[datetime] = None
    patrol_length_days: Optional[int] = None

    # advisory only; never read by the workflow
    ai_risk_score: Optional[float] = None
    ai_likelihood_score: Optional[int] = None
    ai_consequence_score: Optional[int] = None
    ai_generated_summary: Optional[str] = None
    ai_suggested_mitigations: Optional[str] = None
    ai_regulatory_considerations: Optional[str] = None

    @field_validator("approval_steps")
    @classmethod
    def _one_step_per_level(cls, v: Ledger) -> Ledger:
        levels = tuple(step.level for step in v)
        if levels != LEVEL_ORDER:
            raise ValueError(f"approval steps must follow level order, got {[lv.value for lv in levels]}")
        return v
