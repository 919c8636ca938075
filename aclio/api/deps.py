# aclio/api/deps.py
from typing import Optional

import httpx
from fastapi import HTTPException

from aclio.core.config import settings


def get_llm_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for upstream LLM calls. None means the real network; tests override this."""
    return None


def require_api_key() -> None:
    if not settings.api_key_configured:
        raise HTTPException(status_code=500, detail="API key not configured on server")
