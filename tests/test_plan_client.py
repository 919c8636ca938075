from __future__ import annotations

import json

import httpx
import pytest

from aclio.api.deps import get_llm_transport
from aclio.core.errors import ApiError, AppError
from aclio.main import app
from aclio.schemas.goal import Gender, LocationData, Step, UserProfile
from aclio.schemas.planner import DoItForMeResponse, ExpandStepResponse
from aclio.utils.plan_client import PlanGenerationClient

BASE_URL = "http://testserver/api"


def make_client(handler) -> PlanGenerationClient:
    return PlanGenerationClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_check_health() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/health"
        return httpx.Response(200, json={"status": "ok", "apiKeyConfigured": True})

    async with make_client(handler) as client:
        assert await client.check_health() is True


@pytest.mark.asyncio
async def test_check_health_false_without_key_or_server() -> None:
    async with make_client(lambda r: httpx.Response(200, json={"status": "ok", "apiKeyConfigured": False})) as client:
        assert await client.check_health() is False

    def down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(down) as client:
        assert await client.check_health() is False


@pytest.mark.asyncio
async def test_generate_steps_sends_profile_and_location() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "category": "Creative",
            "steps": [{"id": 1, "title": "Tune", "description": "Use an app", "duration": "5 mins"}],
        })

    async with make_client(handler) as client:
        plan = await client.generate_steps(
            "  Learn guitar ",
            profile=UserProfile(name="Sam", age="29", gender=Gender.FEMALE),
            location=LocationData(latitude=0, longitude=0, city="Lisbon", country="Portugal"),
            additional_context="Q: Budget?\nA: $200",
        )

    assert plan.category == "Creative"
    assert plan.to_steps() == [Step(id=1, title="Tune", description="Use an app", duration="5 mins")]
    body = seen["body"]
    assert body["goal"] == "Learn guitar"
    assert body["profile"] == {"name": "Sam", "age": "29", "gender": "Female"}
    assert body["location"] == {"city": "Lisbon", "country": "Portugal"}
    assert body["additionalContext"] == "Q: Budget?\nA: $200"
    assert "Health & Fitness" in body["categories"]


@pytest.mark.asyncio
async def test_invalid_goal_never_hits_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("network should not be called")

    async with make_client(handler) as client:
        with pytest.raises(AppError) as excinfo:
            await client.generate_steps("abc")

    assert excinfo.value.kind == AppError.VALIDATION
    assert excinfo.value.message == "Goal must be at least 5 characters"
    assert excinfo.value.is_retryable is False


@pytest.mark.asyncio
async def test_server_error_carries_message() -> None:
    handler = lambda r: httpx.Response(500, json={"error": "Rate limit reached for model"})

    async with make_client(handler) as client:
        with pytest.raises(ApiError) as excinfo:
            await client.generate_questions("Learn guitar")

    error = excinfo.value
    assert error.kind == ApiError.SERVER
    assert error.message == "Rate limit reached for model"
    assert AppError.from_exception(error).kind == AppError.RATE_LIMITED


@pytest.mark.asyncio
async def test_error_status_without_json() -> None:
    async with make_client(lambda r: httpx.Response(503, text="unavailable")) as client:
        with pytest.raises(ApiError) as excinfo:
            await client.generate_questions("Learn guitar")
    assert excinfo.value.message == "Request failed with status 503"


@pytest.mark.asyncio
async def test_unexpected_shape_is_decode_error() -> None:
    async with make_client(lambda r: httpx.Response(200, json={"steps": "nope"})) as client:
        with pytest.raises(ApiError) as excinfo:
            await client.generate_steps("Learn guitar")

    assert excinfo.value.kind == ApiError.DECODE
    assert AppError.from_exception(excinfo.value).message == "Unable to process server response"


@pytest.mark.asyncio
async def test_timeout_maps_to_timeout_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with make_client(handler) as client:
        with pytest.raises(ApiError) as excinfo:
            await client.do_it_for_me(Step(id=1, title="Plan"), "Learn guitar")

    assert excinfo.value.kind == ApiError.NETWORK
    app_error = AppError.from_exception(excinfo.value)
    assert app_error.kind == AppError.TIMEOUT
    assert app_error.is_retryable is True


@pytest.mark.asyncio
async def test_expand_step_content() -> None:
    payload = {
        "detailedGuide": "Start with standard tuning.",
        "tips": ["Tune every session"],
        "resources": [{"name": "GuitarTuna", "type": "app", "cost": "Free"}, {"name": "Fender Tune"}],
        "searchQuery": "how to tune a guitar",
    }
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=payload)

    async with make_client(handler) as client:
        expanded = await client.expand_step(Step(id=2, title="Tune it", description="Use an app"), "Learn guitar")

    assert seen["body"]["goalName"] == "Learn guitar"
    assert seen["body"]["step"] == {"id": 2, "title": "Tune it", "description": "Use an app"}
    assert expanded.content == (
        "Start with standard tuning.\n\n**Tips:**\n• Tune every session\n"
        "\n**Resources:**\n• GuitarTuna (Free)\n• Fender Tune"
    )


def test_expand_step_content_empty() -> None:
    assert ExpandStepResponse().content == ""


def test_do_it_for_me_display_content() -> None:
    assert DoItForMeResponse(content="Drafted email").display_content == "Drafted email"
    assert DoItForMeResponse(result="Result text", content="Drafted email").display_content == "Result text"
    assert DoItForMeResponse(result="", content="Fallback").display_content == "Fallback"
    assert DoItForMeResponse().display_content == ""


@pytest.mark.asyncio
async def test_chat_stream_yields_chunks(make_goal) -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        body = 'data: {"text": "Keep "}\n\ndata: {"text": "going"}\n\ndata: {"done": true}\n\n'
        return httpx.Response(200, content=body.encode())

    history = [{"role": "user", "content": str(i)} for i in range(6)]
    async with make_client(handler) as client:
        chunks = [c async for c in client.chat_stream("How am I doing?", goal=make_goal(completed=[1]), chat_history=history)]

    assert chunks == ["Keep ", "going"]
    assert seen["body"]["goalName"] == "Learn guitar"
    assert seen["body"]["goalCategory"] == "Personal"
    assert seen["body"]["completedSteps"] == [1]
    assert [t["content"] for t in seen["body"]["chatHistory"]] == ["2", "3", "4", "5"]


@pytest.mark.asyncio
async def test_chat_stream_error_event_raises() -> None:
    body = 'data: {"text": "Hm"}\n\ndata: {"error": "Invalid API Key"}\n\n'

    async with make_client(lambda r: httpx.Response(200, content=body.encode())) as client:
        with pytest.raises(ApiError) as excinfo:
            async for _ in client.chat_stream("hi"):
                pass

    assert excinfo.value.message == "Invalid API Key"


@pytest.mark.asyncio
async def test_chat_stream_non_200() -> None:
    async with make_client(lambda r: httpx.Response(500, json={"error": "nope"})) as client:
        with pytest.raises(ApiError) as excinfo:
            async for _ in client.chat_stream("hi"):
                pass
    assert excinfo.value.message == "Chat request failed"


@pytest.mark.asyncio
async def test_client_against_proxy_app(api_key) -> None:
    def llm(request: httpx.Request) -> httpx.Response:
        content = json.dumps([{"id": 1, "question": "How often can you practice?", "placeholder": "3x a week"}])
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    app.dependency_overrides[get_llm_transport] = lambda: httpx.MockTransport(llm)
    try:
        client = PlanGenerationClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=app))
        async with client:
            assert await client.check_health() is True
            result = await client.generate_questions("Learn guitar")
    finally:
        app.dependency_overrides.pop(get_llm_transport, None)

    assert [q.question for q in result.questions] == ["How often can you practice?"]
