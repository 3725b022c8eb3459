"""
Error taxonomy for the approval workflow.

Everything raised from the ledger, the state machine and the reset policy is
detected before any state is written, so callers never see a half-updated
assessment. The API layer maps these onto HTTP status codes in one place.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for every workflow failure surfaced to callers."""


class InvalidLevelError(WorkflowError):
    """Decision targeted a level that is not awaiting a decision."""


class LevelNotFoundError(WorkflowError):
    """Ledger is malformed: a level has no step, or steps are out of order."""


class NotFoundError(WorkflowError):
    def __init__(self, assessment_id: str):
        super().__init__(f"assessment not found: {assessment_id}")
        self.assessment_id = assessment_id


class ValidationError(WorkflowError):
    """Decision input rejected before mutation (e.g. notes too short)."""


class ConflictError(WorkflowError):
    """Stored record changed since it was read; reload and re-derive."""


class PermissionDeniedError(WorkflowError):
    """Actor may not perform this action on this assessment."""
