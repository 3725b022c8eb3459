# apps/api/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from apps.api.routers import assessments
from core.config import settings
from core.errors import (
    ConflictError,
    InvalidLevelError,
    LevelNotFoundError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    WorkflowError,
)
from core.logging import configure_logging
from services.llm.ollama_client import LLMError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("store backend: %s", settings.STORE_BACKEND)
    yield


app = FastAPI(title="Vessel Risk Assessment Workflow API", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(assessments.router)

# most specific first; WorkflowError is the catch-all
_STATUS_FOR_ERROR = [
    (NotFoundError, 404),
    (PermissionDeniedError, 403),
    (InvalidLevelError, 409),
    (ConflictError, 409),
    (ValidationError, 422),
    (LevelNotFoundError, 500),
    (WorkflowError, 400),
]


@app.exception_handler(WorkflowError)
def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    code = next(c for cls, c in _STATUS_FOR_ERROR if isinstance(exc, cls))
    if code >= 500:
        logger.error("workflow invariant broken on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.exception_handler(LLMError)
def llm_error_handler(request: Request, exc: LLMError) -> JSONResponse:
    logger.warning("llm error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": f"llm error: {exc}"})


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
