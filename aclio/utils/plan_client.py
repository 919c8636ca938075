# aclio/utils/plan_client.py
"""
HTTP client for the plan generation endpoints.

Every call validates its input first, so invalid text never reaches the
network. Transport failures become ``ApiError`` of kind ``network``; error
statuses become ``server`` with the server's ``error`` message; bodies that
do not match the expected shape become ``decode``.
"""
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from aclio.core.config import settings
from aclio.core.errors import ApiError
from aclio.schemas.goal import GOAL_CATEGORIES, Goal, LocationData, Step, UserProfile
from aclio.schemas.planner import (
    DoItForMeResponse,
    ExpandStepResponse,
    GenerateQuestionsResponse,
    GenerateStepsResponse,
    HealthResponse,
)
from aclio.utils.validation import validate_chat_message, validate_goal

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)

CHAT_HISTORY_LIMIT = 4


def _profile_body(profile: UserProfile) -> Dict[str, str]:
    return {
        "name": profile.name,
        "age": profile.age,
        "gender": profile.gender.value if profile.gender else "",
    }


def _step_body(step: Step) -> Dict[str, Any]:
    return {"id": step.id, "title": step.title, "description": step.description}


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if message:
            return str(message)
        return "Server error"
    return f"Request failed with status {response.status_code}"


class PlanGenerationClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.CLIENT_TIMEOUT_S,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "PlanGenerationClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        endpoint: str,
        response_model: Type[R],
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
    ) -> R:
        logger.info(f"📡 API: {method} {endpoint}")
        try:
            response = await self._client.request(method, endpoint, json=body)
        except httpx.TransportError as e:
            logger.error(f"❌ API: {endpoint} transport error: {e!r}")
            raise ApiError.network(e) from e

        logger.info(f"📥 API Status: {response.status_code}")

        if response.status_code >= 400:
            logger.error(f"❌ API Error Response: {response.text[:500]}")
            raise ApiError.server(_error_message(response), response.status_code)

        try:
            return response_model.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"❌ API Decoding error: {e.error_count()} errors, raw: {response.text[:500]}")
            raise ApiError.decode() from e

    # Health
    async def check_health(self) -> bool:
        """True only when the server is up and has its LLM key."""
        try:
            health = await self._request("health", HealthResponse)
        except ApiError as e:
            logger.warning(f"⚠️ Backend health check failed: {e.message}")
            return False
        return health.status == "ok" and health.api_key_configured is True

    # Plan generation
    async def generate_steps(
        self,
        goal: str,
        profile: Optional[UserProfile] = None,
        location: Optional[LocationData] = None,
        additional_context: Optional[str] = None,
        categories: Optional[List[str]] = None,
    ) -> GenerateStepsResponse:
        validate_goal(goal).raise_for_error()

        body: Dict[str, Any] = {
            "goal": goal.strip(),
            "categories": ", ".join(categories or GOAL_CATEGORIES),
        }
        if profile is not None:
            body["profile"] = _profile_body(profile)
        if location is not None:
            body["location"] = {"city": location.city or "", "country": location.country or ""}
        if additional_context:
            body["additionalContext"] = additional_context

        return await self._request("generate-steps", GenerateStepsResponse, "POST", body)

    async def generate_questions(
        self, goal: str, profile: Optional[UserProfile] = None
    ) -> GenerateQuestionsResponse:
        validate_goal(goal).raise_for_error()

        body: Dict[str, Any] = {"goal": goal.strip()}
        if profile is not None:
            body["profile"] = _profile_body(profile)
        return await self._request("generate-questions", GenerateQuestionsResponse, "POST", body)

    async def expand_step(
        self, step: Step, goal_name: str, profile: Optional[UserProfile] = None
    ) -> ExpandStepResponse:
        body: Dict[str, Any] = {"step": _step_body(step), "goalName": goal_name}
        if profile is not None:
            body["profile"] = _profile_body(profile)
        return await self._request("expand-step", ExpandStepResponse, "POST", body)

    async def do_it_for_me(
        self, step: Step, goal_name: str, profile: Optional[UserProfile] = None
    ) -> DoItForMeResponse:
        body: Dict[str, Any] = {"step": _step_body(step), "goalName": goal_name}
        if profile is not None:
            body["profile"] = _profile_body(profile)
        return await self._request("do-it-for-me", DoItForMeResponse, "POST", body)

    # Chat
    async def chat_stream(
        self,
        message: str,
        goal: Optional[Goal] = None,
        chat_history: Optional[List[Dict[str, str]]] = None,
        profile: Optional[UserProfile] = None,
    ) -> AsyncIterator[str]:
        """Yield reply text chunks. Closing the iterator early cancels the request."""
        validate_chat_message(message).raise_for_error()

        body: Dict[str, Any] = {
            "message": message,
            "goalName": goal.name if goal else "General",
            "goalCategory": (goal.category if goal and goal.category else "Personal"),
            "chatHistory": list(chat_history or [])[-CHAT_HISTORY_LIMIT:],
        }
        if goal is not None:
            body["steps"] = [_step_body(s) for s in goal.steps]
            body["completedSteps"] = list(goal.completed_steps)
        if profile is not None:
            body["profile"] = _profile_body(profile)

        logger.info("📡 API: POST talk-to-aclio-stream")
        try:
            async with self._client.stream("POST", "talk-to-aclio-stream", json=body) as response:
                if response.status_code != 200:
                    await response.aread()
                    raise ApiError.server("Chat request failed", response.status_code)

                async for line in response.aiter_lines():
                    if not line.startswith("data: "):
                        continue
                    try:
                        event = json.loads(line[len("data: "):])
                    except ValueError:
                        continue
                    if not isinstance(event, dict):
                        continue
                    if isinstance(event.get("text"), str):
                        yield event["text"]
                    if event.get("done") is True:
                        break
                    if isinstance(event.get("error"), str):
                        raise ApiError.server(event["error"])
        except httpx.TransportError as e:
            logger.error(f"❌ API: chat stream transport error: {e!r}")
            raise ApiError.network(e) from e
