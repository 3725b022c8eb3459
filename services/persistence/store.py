from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import TypeAdapter

from domain.models import RiskAssessment

_STAMP = TypeAdapter(datetime)


def to_document(assessment: RiskAssessment) -> dict[str, Any]:
    """JSON-mode dump: enums as their literals, timestamps as ISO-8601 strings."""
    return assessment.model_dump(mode="json", exclude={"id"})


def from_document(doc: dict[str, Any]) -> RiskAssessment:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return RiskAssessment.model_validate(data)


def serialize_patch(assessment: RiskAssessment, fields: set[str]) -> dict[str, Any]:
    return assessment.model_dump(mode="json", include=fields)


def next_stamp(previous: datetime | None) -> datetime:
    """Strictly increasing last-modified stamp (compare-and-swap key)."""
    now = datetime.now(timezone.utc)
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def stamp_str(stamp: datetime | None) -> str | None:
    """Wire form of a stamp, identical to what to_document writes."""
    if stamp is None:
        return None
    return _STAMP.dump_python(stamp, mode="json")


class AssessmentStore(ABC):
    """Record store contract consumed by the workflow service."""

    @abstractmethod
    def get(self, assessment_id: str) -> RiskAssessment:
        """Return the assessment or raise NotFoundError."""

    @abstractmethod
    def list_all(self) -> list[RiskAssessment]:
        """All assessments, newest submission first."""

    @abstractmethod
    def create(self, assessment: RiskAssessment) -> RiskAssessment:
        """Persist a new assessment; assigns id and last_modified."""

    @abstractmethod
    def update(
        self,
        assessment_id: str,
        patch: dict[str, Any],
        expected_last_modified: datetime | None,
    ) -> RiskAssessment:
        """
        Apply `patch` (already JSON-serialized) only if the stored
        last_modified still equals `expected_last_modified`; raise
        ConflictError otherwise. Stamps a new last_modified.
        """
