from functools import lru_cache

from fastapi import Depends

from apps.api.auth import get_current_actor
from core.config import settings
from services.assessments import AssessmentService
from services.persistence.memory import InMemoryAssessmentStore
from services.persistence.mongo import MongoAssessmentStore
from services.persistence.store import AssessmentStore


@lru_cache
def get_store() -> AssessmentStore:
    """Singleton record store, picked by STORE_BACKEND."""
    if settings.STORE_BACKEND == "memory":
        return InMemoryAssessmentStore()
    return MongoAssessmentStore()


def get_service(store: AssessmentStore = Depends(get_store)) -> AssessmentService:
    return AssessmentService(store)


def get_current_active_user(actor=Depends(get_current_actor)):
    """
    Placeholder for account checks (disabled users etc.).
    The identity provider owns them today.
    """
    return actor
