from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime
from typing import Any

from core.errors import ConflictError, NotFoundError
from domain.models import RiskAssessment
from services.persistence.store import (
    AssessmentStore,
    from_document,
    next_stamp,
    stamp_str,
    to_document,
)


class InMemoryAssessmentStore(AssessmentStore):
    """
    Process-local store with the same serialization and compare-and-swap
    semantics as the Mongo store. Used for local runs and tests.
    """

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, assessment_id: str) -> RiskAssessment:
        with self._lock:
            doc = self._docs.get(assessment_id)
            if doc is None:
                raise NotFoundError(assessment_id)
            return from_document(copy.deepcopy(doc))

    def list_all(self) -> list[RiskAssessment]:
        with self._lock:
            docs = copy.deepcopy(list(self._docs.values()))
        items = [from_document(d) for d in docs]
        return sorted(items, key=lambda a: a.submission_date, reverse=True)

    def create(self, assessment: RiskAssessment) -> RiskAssessment:
        stored = assessment.model_copy(
            update={"id": uuid.uuid4().hex, "last_modified": next_stamp(None)}
        )
        doc = to_document(stored)
        doc["_id"] = stored.id
        with self._lock:
            if any(d["reference_number"] == stored.reference_number for d in self._docs.values()):
                raise ConflictError(f"reference number already used: {stored.reference_number}")
            self._docs[stored.id] = doc
        return stored

    def update(
        self,
        assessment_id: str,
        patch: dict[str, Any],
        expected_last_modified: datetime | None,
    ) -> RiskAssessment:
        with self._lock:
            doc = self._docs.get(assessment_id)
            if doc is None:
                raise NotFoundError(assessment_id)
            if doc.get("last_modified") != stamp_str(expected_last_modified):
                raise ConflictError(f"assessment {assessment_id} was modified concurrently")
            doc.update(copy.deepcopy(patch))
            doc["last_modified"] = stamp_str(next_stamp(expected_last_modified))
            return from_document(copy.deepcopy(doc))
