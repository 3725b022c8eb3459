from __future__ import annotations

import httpx

from core.config import settings

DEFAULT_MODEL = settings.OLLAMA_MODEL


class LLMError(Exception): ...


def generate(
    prompt: str,
    model: str | None = None,
    temperature: float = 0.2,
    timeout_s: int | None = None,
    json_mode: bool = False,
) -> str:
    """Call Ollama /api/generate (non-streaming)."""
    url = f"{settings.OLLAMA_HOST.rstrip('/')}/api/generate"
    payload = {
        "model": model or DEFAULT_MODEL,
        "prompt": prompt,
        "options": {"temperature": temperature},
        "stream": False,
    }
    if json_mode:
        payload["format"] = "json"
    try:
        with httpx.Client(timeout=timeout_s or settings.LLM_TIMEOUT_S) as client:
            r = client.post(url, json=payload)
        r.raise_for_status()
        data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        raise LLMError(str(e)) from e
    text = (data or {}).get("response", "")
    if not text:
        raise LLMError("empty response from LLM")
    return text.strip()
