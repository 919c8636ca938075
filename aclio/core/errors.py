# aclio/core/errors.py
"""
Client-side error taxonomy.

``ApiError`` is what the plan client raises for a failed proxy call.
``AppError`` is the single displayable error a UI layer shows, with a retry
affordance when ``is_retryable`` is set.
"""
from typing import Optional

import httpx


class ApiError(Exception):
    SERVER = "server"
    DECODE = "decode"
    NETWORK = "network"

    def __init__(self, kind: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @classmethod
    def server(cls, message: str, status_code: Optional[int] = None) -> "ApiError":
        return cls(cls.SERVER, message, status_code)

    @classmethod
    def decode(cls, message: str = "Failed to decode response") -> "ApiError":
        return cls(cls.DECODE, message)

    @classmethod
    def network(cls, error: Exception) -> "ApiError":
        err = cls(cls.NETWORK, str(error) or type(error).__name__)
        err.__cause__ = error
        return err


class AppError(Exception):
    NETWORK = "network"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    SERVER = "server"
    DECODE = "decode"
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN = "unknown"

    DEFAULT_MESSAGES = {
        NETWORK: "Unable to connect to the server. Please check your internet connection and try again.",
        TIMEOUT: "The request took too long. Please try again.",
        RATE_LIMITED: "You're making too many requests. Please wait a moment and try again.",
        DECODE: "Unable to process server response",
        UNAUTHORIZED: "Your session has expired. Please restart the app.",
        UNKNOWN: "Something went wrong. Please try again.",
    }

    TITLES = {
        NETWORK: "Connection Error",
        TIMEOUT: "Request Timeout",
        RATE_LIMITED: "Slow Down",
        SERVER: "Server Error",
        DECODE: "Server Error",
        VALIDATION: "Invalid Input",
        UNAUTHORIZED: "Session Expired",
        UNKNOWN: "Error",
    }

    RETRYABLE = {NETWORK, TIMEOUT, RATE_LIMITED, SERVER}

    def __init__(self, kind: str, message: Optional[str] = None):
        self.kind = kind
        self.message = message or self.DEFAULT_MESSAGES.get(kind, self.DEFAULT_MESSAGES[self.UNKNOWN])
        super().__init__(self.message)

    @property
    def title(self) -> str:
        return self.TITLES[self.kind]

    @property
    def is_retryable(self) -> bool:
        return self.kind in self.RETRYABLE

    @classmethod
    def validation(cls, message: str) -> "AppError":
        return cls(cls.VALIDATION, message)

    @classmethod
    def from_exception(cls, error: BaseException) -> "AppError":
        if isinstance(error, AppError):
            return error
        if isinstance(error, ApiError):
            return cls._from_api_error(error)
        if isinstance(error, httpx.TimeoutException):
            return cls(cls.TIMEOUT)
        if isinstance(error, httpx.TransportError):
            return cls(cls.NETWORK)
        if isinstance(error, httpx.HTTPError):
            return cls(cls.SERVER, str(error))
        return cls(cls.UNKNOWN, str(error) or None)

    @classmethod
    def _from_api_error(cls, error: ApiError) -> "AppError":
        if error.kind == ApiError.NETWORK:
            cause = error.__cause__
            return cls.from_exception(cause) if cause is not None else cls(cls.NETWORK)
        if error.kind == ApiError.DECODE:
            return cls(cls.DECODE)
        lowered = error.message.lower()
        if "too many requests" in lowered or "rate limit" in lowered or error.status_code == 429:
            return cls(cls.RATE_LIMITED)
        return cls(cls.SERVER, error.message)

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind!r}, message={self.message!r})"
