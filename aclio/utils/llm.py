# aclio/utils/llm.py
"""
Calls to the upstream chat-completion API (OpenAI-compatible, Groq by default).
"""
import json
import logging
import re
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from aclio.core.config import settings

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """The LLM API answered with a non-2xx status."""


def llm_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_S, transport=transport)


def _headers() -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {settings.GROQ_API_KEY}",
    }


def _payload(messages: List[Dict[str, str]], max_tokens: int, stream: bool = False) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": settings.LLM_MODEL,
        "messages": messages,
        "temperature": settings.LLM_TEMPERATURE,
        "max_tokens": max_tokens,
    }
    if stream:
        payload["stream"] = True
    return payload


def upstream_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "API Error"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return "API Error"


async def chat_completion(
    client: httpx.AsyncClient, messages: List[Dict[str, str]], max_tokens: int
) -> str:
    """Return the first choice's message content."""
    response = await client.post(
        settings.LLM_API_URL,
        headers=_headers(),
        json=_payload(messages, max_tokens),
    )

    if not response.is_success:
        message = upstream_error_message(response)
        logger.error(f"LLM API error {response.status_code}: {message}")
        raise UpstreamError(message)

    data = response.json()
    return data["choices"][0]["message"]["content"]


async def stream_chat_completion(
    client: httpx.AsyncClient, messages: List[Dict[str, str]], max_tokens: int
) -> AsyncIterator[str]:
    """Yield content deltas from a streamed completion until the upstream sends [DONE]."""
    async with client.stream(
        "POST",
        settings.LLM_API_URL,
        headers=_headers(),
        json=_payload(messages, max_tokens, stream=True),
    ) as response:
        if not response.is_success:
            await response.aread()
            message = upstream_error_message(response)
            logger.error(f"LLM stream error {response.status_code}: {message}")
            raise UpstreamError(message)

        async for line in response.aiter_lines():
            line = line.strip()
            if not line.startswith("data:"):
                continue
            data = line[len("data:"):].strip()
            if data == "[DONE]":
                return
            try:
                chunk = json.loads(data)
            except ValueError:
                logger.debug(f"Skipping unparseable stream line: {data[:80]}")
                continue
            choices = chunk.get("choices") or []
            if not choices:
                continue
            text = (choices[0].get("delta") or {}).get("content")
            if text:
                yield text


def strip_code_fences(content: str) -> str:
    content = content.strip()
    if content.startswith("```"):
        content = re.sub(r"```json\n?", "", content)
        content = re.sub(r"```\n?", "", content)
    return content


def parse_model_json(content: str) -> Any:
    """Parse model output as JSON. Raises ValueError when it isn't."""
    return json.loads(strip_code_fences(content))
