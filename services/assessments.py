"""
Assessment service: read-compute-write around the pure workflow core.

Each call loads the current record, runs the pure transition (which raises
before anything changes) and writes the result back with a compare-and-swap
on last_modified. Conflicts surface to the caller; nothing is retried here.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from core.config import settings
from core.errors import ConflictError, PermissionDeniedError
from domain.models import (
    Actor,
    ApprovalDecision,
    ApprovalLevel,
    AssessmentContent,
    AssessmentStatus,
    RiskAssessment,
)
from domain.value_objects import ComplianceFlags, RiskScore
from services.advisory.scoring import score_assessment, summarize_assessment
from services.observability.metrics import timing_metric
from services.persistence.store import AssessmentStore, serialize_patch
from services.workflow.ledger import current_level, halted_step, initialize_ledger
from services.workflow.policies import (
    apply_edit,
    compute_patrol_length_days,
    materialize_attachments,
)
from services.workflow.transitions import (
    INITIAL_STATUS,
    apply_decision,
    can_decide,
    can_edit,
    resume_after_information,
    submit_draft,
)

logger = logging.getLogger(__name__)

Scorer = Callable[[AssessmentContent], RiskScore]
Summarizer = Callable[[AssessmentContent], str]

REFERENCE_ATTEMPTS = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EditResult:
    assessment: RiskAssessment
    workflow_reset: bool
    changed_fields: list[str] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)


class AssessmentService:
    def __init__(
        self,
        store: AssessmentStore,
        scorer: Scorer = score_assessment,
        summarizer: Optional[Summarizer] = summarize_assessment,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._scorer = scorer
        self._summarizer = summarizer
        self._clock = clock

    # -------- reads -------------------------------------------------------- #
    def get(self, assessment_id: str) -> RiskAssessment:
        return self._store.get(assessment_id)

    def list_all(self) -> list[RiskAssessment]:
        return self._store.list_all()

    def workflow_view(self, assessment_id: str, actor: Actor) -> dict[str, Any]:
        assessment = self._store.get(assessment_id)
        level = None
        if assessment.status != AssessmentStatus.DRAFT:
            level = current_level(assessment.approval_steps)
        halted = halted_step(assessment.approval_steps)
        return {
            "assessment_id": assessment.id,
            "status": assessment.status,
            "current_level": level,
            "halted_at": halted.level if halted else None,
            "can_act": level is not None and can_decide(actor, level),
            "can_edit": can_edit(actor, assessment),
        }

    # -------- writes ------------------------------------------------------- #
    def _reference_number(self, now: datetime, attempt: int = 0) -> str:
        # first try keeps the time-derived suffix; retries draw random digits
        if attempt == 0:
            suffix = int(now.timestamp() * 1000) % 100000
        else:
            suffix = secrets.randbelow(100000)
        return f"{settings.REFERENCE_PREFIX}-{now.year}-{suffix:05d}"

    def create(self, content: AssessmentContent, actor: Actor, draft: bool = False) -> RiskAssessment:
        now = self._clock()
        data = content.model_dump(exclude={"attachments"})
        assessment = RiskAssessment(
            **data,
            attachments=materialize_attachments(content.attachments, [], now),
            reference_number=self._reference_number(now),
            status=AssessmentStatus.DRAFT if draft else INITIAL_STATUS,
            approval_steps=initialize_ledger(),
            submitted_by=actor.name,
            submitted_by_uid=actor.id,
            submission_date=now,
            patrol_length_days=compute_patrol_length_days(
                content.patrol_start_date, content.patrol_end_date
            ),
        )
        for attempt in range(1, REFERENCE_ATTEMPTS + 1):
            try:
                with timing_metric("assessment.create"):
                    stored = self._store.create(assessment)
                break
            except ConflictError:
                if attempt == REFERENCE_ATTEMPTS:
                    raise
                logger.warning("reference number %s taken, drawing another", assessment.reference_number)
                assessment = assessment.model_copy(
                    update={"reference_number": self._reference_number(now, attempt)}
                )
        logger.info(
            "created %s (%s) for %s by %s",
            stored.reference_number,
            stored.status.value,
            stored.vessel_name,
            actor.id,
        )
        return stored

    def _save(
        self, before: RiskAssessment, after: RiskAssessment, fields: set[str]
    ) -> RiskAssessment:
        patch = serialize_patch(after, fields)
        with timing_metric("assessment.update"):
            return self._store.update(before.id, patch, before.last_modified)

    def _require_editor(self, actor: Actor, assessment: RiskAssessment) -> None:
        if not can_edit(actor, assessment):
            raise PermissionDeniedError(
                f"{actor.id} is neither the submitter of {assessment.reference_number} nor an admin"
            )

    def submit(self, assessment_id: str, actor: Actor) -> RiskAssessment:
        assessment = self._store.get(assessment_id)
        self._require_editor(actor, assessment)
        submitted = submit_draft(assessment)
        return self._save(assessment, submitted, {"status", "approval_steps"})

    def decide(
        self,
        assessment_id: str,
        level: ApprovalLevel,
        decision: ApprovalDecision,
        notes: str,
        actor: Actor,
        flags: Optional[ComplianceFlags] = None,
    ) -> RiskAssessment:
        assessment = self._store.get(assessment_id)
        decided = apply_decision(assessment, level, decision, actor, notes, flags, self._clock())
        return self._save(assessment, decided, {"status", "approval_steps"})

    def edit(self, assessment_id: str, revised: AssessmentContent, actor: Actor) -> EditResult:
        original = self._store.get(assessment_id)
        self._require_editor(actor, original)
        outcome = apply_edit(original, revised, actor, self._clock())

        fields = set(AssessmentContent.model_fields) | {"patrol_length_days"}
        if outcome.workflow_reset:
            fields |= {"status", "approval_steps"}
        saved = self._save(original, outcome.assessment, fields)
        return EditResult(
            assessment=saved,
            workflow_reset=outcome.workflow_reset,
            changed_fields=outcome.changes.changed_fields,
            notices=outcome.notices,
        )

    def resubmit(self, assessment_id: str, actor: Actor) -> RiskAssessment:
        assessment = self._store.get(assessment_id)
        self._require_editor(actor, assessment)
        resumed = resume_after_information(assessment)
        logger.info(
            "%s resumed at %s by %s",
            assessment.reference_number,
            resumed.status.value,
            actor.id,
        )
        return self._save(assessment, resumed, {"status", "approval_steps"})

    def refresh_advisory(self, assessment_id: str) -> RiskAssessment:
        """Store fresh AI advisory fields; status and ledger are never touched."""
        assessment = self._store.get(assessment_id)
        score = self._scorer(assessment)
        update: dict[str, Any] = {
            "ai_risk_score": score.value,
            "ai_likelihood_score": score.likelihood,
            "ai_consequence_score": score.consequence,
            "ai_suggested_mitigations": score.recommendations,
            "ai_regulatory_considerations": score.regulatory_notes,
        }
        if self._summarizer is not None:
            update["ai_generated_summary"] = self._summarizer(assessment)
        advised = assessment.model_copy(update=update)
        return self._save(assessment, advised, set(update))
