from __future__ import annotations

import httpx
import pytest

from aclio.core.errors import ApiError, AppError
from aclio.utils.validation import (
    validate_age,
    validate_chat_message,
    validate_goal,
    validate_name,
    validate_question_answer,
)


@pytest.mark.parametrize(
    "text, message",
    [
        ("   ", "Please enter a goal"),
        ("Run", "Goal must be at least 5 characters"),
        ("x" * 501, "Goal must be less than 500 characters"),
        ("Learn how to make a bomb", "Please enter a constructive goal"),
    ],
)
def test_invalid_goals(text: str, message: str) -> None:
    result = validate_goal(text)
    assert result.is_valid is False
    assert result.error_message == message


def test_valid_goal() -> None:
    assert validate_goal("  Run a marathon  ").is_valid is True


def test_names() -> None:
    assert validate_name("Mary-Jane O'Neil").is_valid is True
    assert validate_name("J").error_message == "Name must be at least 2 characters"
    assert validate_name("R2D2").is_valid is False


def test_age_is_optional_but_bounded() -> None:
    assert validate_age("").is_valid is True
    assert validate_age("13").is_valid is True
    assert validate_age("12").error_message == "You must be at least 13 years old"
    assert validate_age("121").is_valid is False
    assert validate_age("twenty").error_message == "Please enter a valid age"


def test_chat_and_answers() -> None:
    assert validate_chat_message("").is_valid is False
    assert validate_chat_message("x" * 2001).is_valid is False
    assert validate_question_answer("").is_valid is True
    assert validate_question_answer("x" * 1001).is_valid is False


def test_raise_for_error() -> None:
    validate_goal("Run a marathon").raise_for_error()
    with pytest.raises(AppError) as excinfo:
        validate_name("").raise_for_error()
    assert excinfo.value.kind == AppError.VALIDATION
    assert excinfo.value.title == "Invalid Input"


def test_app_error_kinds() -> None:
    request = httpx.Request("GET", "http://testserver/api/health")

    assert AppError.from_exception(httpx.ConnectError("down", request=request)).kind == AppError.NETWORK
    assert AppError.from_exception(httpx.ConnectTimeout("slow", request=request)).kind == AppError.TIMEOUT
    assert AppError.from_exception(ValueError("odd")).kind == AppError.UNKNOWN

    too_many = AppError.from_exception(ApiError.server("Too Many Requests"))
    assert (too_many.kind, too_many.title, too_many.is_retryable) == (AppError.RATE_LIMITED, "Slow Down", True)

    server = AppError.from_exception(ApiError.server("Goal is required", 400))
    assert (server.kind, server.message, server.is_retryable) == (AppError.SERVER, "Goal is required", True)


def test_app_error_passthrough_and_defaults() -> None:
    original = AppError(AppError.UNAUTHORIZED)
    assert AppError.from_exception(original) is original
    assert original.is_retryable is False
    assert original.message == "Your session has expired. Please restart the app."
    assert AppError(AppError.UNKNOWN).is_retryable is False
