from __future__ import annotations

import time
from typing import Any

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import ValidationError as SchemaError

from core.config import settings
from domain.models import Actor

# tokens are issued by the identity provider; this service only reads them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


def create_access_token(actor: Actor, minutes: int | None = None) -> str:
    now = int(time.time())
    ttl = minutes if minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MIN
    payload = {
        "sub": actor.id,
        "name": actor.name,
        "role": actor.role.value,
        "iat": now,
        "exp": now + ttl * 60,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(tok: str) -> dict[str, Any]:
    return jwt.decode(tok, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def get_current_actor(token: str = Depends(oauth2_scheme)) -> Actor:
    try:
        payload = decode_token(token)
        return Actor(id=payload["sub"], name=payload.get("name", payload["sub"]), role=payload["role"])
    except (JWTError, KeyError, SchemaError):
        raise HTTPException(401, "invalid or expired token")
