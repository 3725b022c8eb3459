"""
Approval step ledger: the fixed, ordered set of per-level decision slots.

All functions are pure. They take a ledger (a 3-tuple of frozen steps) and
return a new one; persisting the result is the caller's job.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from core.errors import InvalidLevelError, LevelNotFoundError
from domain.models import (
    FIRST_LEVEL,
    LEVEL_ORDER,
    Actor,
    ApprovalDecision,
    ApprovalLevel,
    ApprovalStep,
    Ledger,
)
from domain.value_objects import ComplianceFlags

logger = logging.getLogger(__name__)


def initialize_ledger() -> Ledger:
    """One empty step per level, in canonical order."""
    return tuple(ApprovalStep(level=level) for level in LEVEL_ORDER)  # type: ignore[return-value]


def _check_shape(ledger: Ledger) -> None:
    if len(ledger) != len(LEVEL_ORDER):
        raise LevelNotFoundError(f"ledger has {len(ledger)} steps, expected {len(LEVEL_ORDER)}")
    for expected, step in zip(LEVEL_ORDER, ledger):
        if step.level != expected:
            raise LevelNotFoundError(
                f"ledger out of order: found {step.level.value} where {expected.value} belongs"
            )


def find_step(ledger: Ledger, level: ApprovalLevel) -> ApprovalStep:
    _check_shape(ledger)
    return ledger[LEVEL_ORDER.index(level)]


def current_level(ledger: Ledger) -> ApprovalLevel | None:
    """
    Level awaiting a decision, or None.

    None means the workflow is halted (a Rejected or Needs Information
    decision stops progression) or every level has approved.
    """
    _check_shape(ledger)
    for step in ledger:
        if step.decision is None:
            return step.level
        if step.decision != ApprovalDecision.APPROVED:
            return None
    return None


def _replace(ledger: Ledger, step: ApprovalStep) -> Ledger:
    idx = LEVEL_ORDER.index(step.level)
    return ledger[:idx] + (step,) + ledger[idx + 1 :]  # type: ignore[return-value]


def record_decision(
    ledger: Ledger,
    level: ApprovalLevel,
    decision: ApprovalDecision,
    actor: Actor,
    notes: str,
    flags: ComplianceFlags | None = None,
    now: datetime | None = None,
) -> Ledger:
    """
    Populate the step for `level` and return the new ledger.

    Only the level currently awaiting a decision is accepted. Compliance flags
    are kept for the first level and dropped for every other level.
    """
    awaiting = current_level(ledger)
    if awaiting is None:
        raise InvalidLevelError(f"no level is awaiting a decision; cannot decide {level.value}")
    if level != awaiting:
        raise InvalidLevelError(f"{level.value} is not awaiting a decision (current: {awaiting.value})")

    flags = flags or ComplianceFlags()
    if level != FIRST_LEVEL:
        if flags.any():
            logger.warning("ignoring compliance flags supplied for %s", level.value)
        flags = ComplianceFlags()

    step = ApprovalStep(
        level=level,
        decision=decision,
        user_id=actor.id,
        user_name=actor.name,
        date=now or datetime.now(timezone.utc),
        notes=notes,
        is_against_fsm=flags.is_against_fsm,
        is_against_mpr=flags.is_against_mpr,
        is_against_crewing_profile=flags.is_against_crewing_profile,
    )
    return _replace(ledger, step)


def reopen_step(ledger: Ledger, level: ApprovalLevel) -> Ledger:
    """Clear one decided step back to pending (resume after Needs Information)."""
    step = find_step(ledger, level)
    if step.decision != ApprovalDecision.NEEDS_INFORMATION:
        raise InvalidLevelError(f"{level.value} is not waiting on more information")
    return _replace(ledger, ApprovalStep(level=level))


def halted_step(ledger: Ledger) -> ApprovalStep | None:
    """First step whose decision stopped the workflow, if any."""
    _check_shape(ledger)
    for step in ledger:
        if step.decision is None:
            return None
        if step.decision != ApprovalDecision.APPROVED:
            return step
    return None
