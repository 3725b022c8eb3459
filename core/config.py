from __future__ import annotations

import os

from pydantic import BaseModel


class Settings(BaseModel):
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MIN: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MIN", "60"))

    # "mongo" for the shared document store, "memory" for local runs
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "mongo")
    MONGO_URL: str = os.getenv("MONGO_URL", "mongodb://mongo:27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "vessel_risk")
    ASSESSMENTS_COLLECTION: str = os.getenv("ASSESSMENTS_COLLECTION", "risk_assessments")

    OLLAMA_HOST: str = os.getenv("OLLAMA_HOST", "http://ollama:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2:3b")
    LLM_TIMEOUT_S: int = int(os.getenv("LLM_TIMEOUT_S", "60"))

    DECISION_NOTES_MIN: int = int(os.getenv("DECISION_NOTES_MIN", "10"))
    DECISION_NOTES_MAX: int = int(os.getenv("DECISION_NOTES_MAX", "1000"))
    MAX_ATTACHMENTS: int = int(os.getenv("MAX_ATTACHMENTS", "5"))
    REFERENCE_PREFIX: str = os.getenv("REFERENCE_PREFIX", "CCG-RA")

    CORS_ALLOW_ORIGINS: list[str] = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000").split(
        ","
    )


settings = Settings()
