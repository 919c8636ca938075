# aclio/api/v1/routes/chat.py
import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from aclio.api.deps import get_llm_transport, require_api_key
from aclio.schemas.planner import ChatStreamRequest
from aclio.utils.llm import llm_client, stream_chat_completion
from aclio.utils.prompts import CHAT_MAX_TOKENS, chat_messages

logger = logging.getLogger(__name__)

router = APIRouter()


def sse_event(data: Dict[str, Any]) -> str:
    return f"data: {json.dumps(data)}\n\n"


@router.post("/talk-to-aclio-stream")
async def talk_to_aclio_stream(
    request: ChatStreamRequest,
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_llm_transport),
):
    """Stream a coach reply as server-sent events."""
    if not request.message:
        raise HTTPException(status_code=400, detail="Message is required")
    require_api_key()

    messages = chat_messages(request)

    async def event_stream() -> AsyncIterator[str]:
        try:
            async with llm_client(transport) as client:
                async for text in stream_chat_completion(client, messages, CHAT_MAX_TOKENS):
                    yield sse_event({"text": text})
            yield sse_event({"done": True})
        except Exception as e:
            # headers are already sent, so the failure travels as an event
            logger.error(f"Chat stream error: {str(e)}")
            yield sse_event({"error": str(e) or "Chat request failed"})

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
