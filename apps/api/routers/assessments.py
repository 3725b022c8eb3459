from typing import List

from fastapi import APIRouter, Depends, status

from apps.api.deps import get_current_active_user, get_service
from apps.api.schemas import DecisionIn, EditOut, WorkflowOut
from domain.models import AssessmentContent, RiskAssessment
from services.assessments import AssessmentService

router = APIRouter(prefix="/assessments", tags=["assessments"])


@router.post("/", response_model=RiskAssessment, status_code=status.HTTP_201_CREATED)
def create_assessment(
    payload: AssessmentContent,
    draft: bool = False,
    user=Depends(get_current_active_user),
    service: AssessmentService = Depends(get_service),
):
    return service.create(payload, user, draft=draft)


@router.get("/", response_model=List[RiskAssessment])
def list_assessments(
    user=Depends(get_current_active_user),
    service: AssessmentService = Depends(get_service),
):
    return service.list_all()


@router.get("/{assessment_id}", response_model=RiskAssessment)
def get_assessment(
    assessment_id: str,
    user=Depends(get_current_active_user),
    service: AssessmentService = Depends(get_service),
):
    return service.get(assessment_id)


@router.put("/{assessment_id}", response_model=EditOut)
def edit_assessment(
    assessment_id: str,
    payload: AssessmentContent,
    user=Depends(get_current_active_user),
    service: AssessmentService = Depends(get_service),
):
    """
    Save content changes. When approvals had already started and the content
    changed substantively, the workflow restarts and `notices` says so.
    """
    result = service.edit(assessment_id, payload, user)
    return EditOut(
        assessment=result.assessment,
        workflow_reset=result.workflow_reset,
        changed_fields=result.changed_fields,
        notices=result.notices,
    )


@router.post("/{assessment_id}/submit", response_model=RiskAssessment)
def submit_assessment(
    assessment_id: str,
    user=Depends(get_current_active_user),
    service: AssessmentService = Depends(get_service),
):
    return service.submit(assessment_id, user)


@router.post("/{assessment_id}/decisions", response_model=RiskAssessment)
def decide_assessment(
    assessment_id: str,
    payload: DecisionIn,
    user=Depends(get_current_active_user),
    service: AssessmentService = Depends(get_service),
):
    return service.decide(
        assessment_id,
        level=payload.level,
        decision=payload.decision,
        notes=payload.notes,
        actor=user,
        flags=payload.flags(),
    )


@router.post("/{assessment_id}/resubmit", response_model=RiskAssessment)
def resubmit_assessment(
    assessment_id: str,
    user=Depends(get_current_active_user),
    service: AssessmentService = Depends(get_service),
):
    return service.resubmit(assessment_id, user)


@router.get("/{assessment_id}/workflow", response_model=WorkflowOut)
def assessment_workflow(
    assessment_id: str,
    user=Depends(get_current_active_user),
    service: AssessmentService = Depends(get_service),
):
    return service.workflow_view(assessment_id, user)


@router.post("/{assessment_id}/advisory", response_model=RiskAssessment)
def refresh_advisory(
    assessment_id: str,
    user=Depends(get_current_active_user),
    service: AssessmentService = Depends(get_service),
):
    """Ask the LLM for an advisory score; never changes workflow state."""
    return service.refresh_advisory(assessment_id)
