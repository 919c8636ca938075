# aclio/api/v1/routes/planner.py
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException

from aclio.api.deps import get_llm_transport, require_api_key
from aclio.schemas.planner import (
    GenerateQuestionsRequest,
    GenerateStepsRequest,
    StepTaskRequest,
)
from aclio.utils.llm import chat_completion, llm_client, parse_model_json
from aclio.utils.prompts import (
    DO_IT_MAX_TOKENS,
    EXPAND_MAX_TOKENS,
    QUESTIONS_MAX_TOKENS,
    STEPS_MAX_TOKENS,
    do_it_for_me_messages,
    expand_step_messages,
    generate_questions_messages,
    generate_steps_messages,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate-steps")
async def generate_steps(
    request: GenerateStepsRequest,
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_llm_transport),
):
    """Create a step-by-step plan and a category for a goal."""
    if not request.goal:
        raise HTTPException(status_code=400, detail="Goal is required")
    require_api_key()

    try:
        async with llm_client(transport) as client:
            content = await chat_completion(client, generate_steps_messages(request), STEPS_MAX_TOKENS)
        return parse_model_json(content)
    except Exception as e:
        logger.error(f"Generate steps error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/generate-questions")
async def generate_questions(
    request: GenerateQuestionsRequest,
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_llm_transport),
) -> Dict[str, Any]:
    """Three short clarifying questions for a goal, wrapped under "questions"."""
    if not request.goal:
        raise HTTPException(status_code=400, detail="Goal is required")
    require_api_key()

    try:
        async with llm_client(transport) as client:
            content = await chat_completion(
                client, generate_questions_messages(request.goal), QUESTIONS_MAX_TOKENS
            )
        return {"questions": parse_model_json(content)}
    except Exception as e:
        logger.error(f"Generate questions error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/expand-step")
async def expand_step(
    request: StepTaskRequest,
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_llm_transport),
):
    """Detailed guide, resources and tips for one step."""
    if request.step is None:
        raise HTTPException(status_code=400, detail="Step is required")
    require_api_key()

    try:
        async with llm_client(transport) as client:
            content = await chat_completion(
                client,
                expand_step_messages(request.resolved_goal_name, request.step),
                EXPAND_MAX_TOKENS,
            )
        return parse_model_json(content)
    except Exception as e:
        logger.error(f"Expand step error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/do-it-for-me")
async def do_it_for_me(
    request: StepTaskRequest,
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_llm_transport),
) -> Dict[str, str]:
    """Have the model complete a step and return its raw text."""
    if request.step is None:
        raise HTTPException(status_code=400, detail="Step is required")
    require_api_key()

    try:
        async with llm_client(transport) as client:
            result = await chat_completion(
                client,
                do_it_for_me_messages(request.resolved_goal_name, request.step, request.profile),
                DO_IT_MAX_TOKENS,
            )
        return {"result": result}
    except Exception as e:
        logger.error(f"Do it for me error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
