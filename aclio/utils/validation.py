# aclio/utils/validation.py
import re
from dataclasses import dataclass
from typing import Optional

from aclio.core.errors import AppError

HARMFUL_PATTERNS = [
    "kill myself",
    "kill someone",
    "hurt myself",
    "suicide",
    "self harm",
    "make a bomb",
    "build a weapon",
]

NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error_message: Optional[str] = None

    def raise_for_error(self) -> None:
        """Raise an AppError of kind 'validation' when the input is invalid."""
        if not self.is_valid:
            raise AppError.validation(self.error_message or "Invalid input")


VALID = ValidationResult(True)


def invalid(message: str) -> ValidationResult:
    return ValidationResult(False, message)


def contains_harmful_content(text: str) -> bool:
    lower_text = text.lower()
    return any(pattern in lower_text for pattern in HARMFUL_PATTERNS)


def validate_goal(text: str) -> ValidationResult:
    trimmed = text.strip()
    if not trimmed:
        return invalid("Please enter a goal")
    if len(trimmed) < 5:
        return invalid("Goal must be at least 5 characters")
    if len(trimmed) > 500:
        return invalid("Goal must be less than 500 characters")
    if contains_harmful_content(trimmed):
        return invalid("Please enter a constructive goal")
    return VALID


def validate_chat_message(text: str) -> ValidationResult:
    trimmed = text.strip()
    if not trimmed:
        return invalid("Please enter a message")
    if len(trimmed) > 2000:
        return invalid("Message must be less than 2000 characters")
    return VALID


def validate_name(text: str) -> ValidationResult:
    trimmed = text.strip()
    if not trimmed:
        return invalid("Please enter your name")
    if len(trimmed) < 2:
        return invalid("Name must be at least 2 characters")
    if len(trimmed) > 50:
        return invalid("Name must be less than 50 characters")
    if not NAME_RE.match(trimmed):
        return invalid("Name can only contain letters, spaces, hyphens, and apostrophes")
    return VALID


def validate_age(text: str) -> ValidationResult:
    trimmed = text.strip()
    if not trimmed:
        return VALID  # age is optional
    try:
        age = int(trimmed)
    except ValueError:
        return invalid("Please enter a valid age")
    if age < 13:
        return invalid("You must be at least 13 years old")
    if age > 120:
        return invalid("Please enter a valid age")
    return VALID


def validate_question_answer(text: str) -> ValidationResult:
    trimmed = text.strip()
    if not trimmed:
        return VALID  # answers are optional
    if len(trimmed) > 1000:
        return invalid("Answer must be less than 1000 characters")
    return VALID
