from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from core.config import settings
from core.errors import ConflictError, NotFoundError
from domain.models import RiskAssessment
from services.persistence.store import (
    AssessmentStore,
    from_document,
    next_stamp,
    stamp_str,
    to_document,
)

logger = logging.getLogger(__name__)


def get_mongo() -> Collection:
    client = MongoClient(settings.MONGO_URL, serverSelectionTimeoutMS=2000)
    db = client[settings.MONGO_DB]
    col = db[settings.ASSESSMENTS_COLLECTION]
    col.create_index([("reference_number", ASCENDING)], unique=True)
    col.create_index([("status", ASCENDING)])
    col.create_index([("submission_date", DESCENDING)])
    return col


class MongoAssessmentStore(AssessmentStore):
    def __init__(self, collection: Collection | None = None) -> None:
        self._col = collection if collection is not None else get_mongo()

    def get(self, assessment_id: str) -> RiskAssessment:
        doc = self._col.find_one({"_id": assessment_id})
        if not doc:
            raise NotFoundError(assessment_id)
        return from_document(doc)

    def list_all(self) -> list[RiskAssessment]:
        return [from_document(d) for d in self._col.find().sort("submission_date", DESCENDING)]

    def create(self, assessment: RiskAssessment) -> RiskAssessment:
        stored = assessment.model_copy(
            update={"id": uuid.uuid4().hex, "last_modified": next_stamp(None)}
        )
        doc = to_document(stored)
        doc["_id"] = stored.id
        try:
            self._col.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError(f"reference number already used: {stored.reference_number}") from e
        return stored

    def update(
        self,
        assessment_id: str,
        patch: dict[str, Any],
        expected_last_modified: datetime | None,
    ) -> RiskAssessment:
        stamp = next_stamp(expected_last_modified)
        update = {**patch, "last_modified": stamp_str(stamp)}
        doc = self._col.find_one_and_update(
            {"_id": assessment_id, "last_modified": stamp_str(expected_last_modified)},
            {"$set": update},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            if self._col.count_documents({"_id": assessment_id}, limit=1) == 0:
                raise NotFoundError(assessment_id)
            logger.warning("stale write rejected for assessment %s", assessment_id)
            raise ConflictError(f"assessment {assessment_id} was modified concurrently")
        return from_document(doc)
