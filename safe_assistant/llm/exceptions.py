"""
safe_assistant/llm/exceptions.py - Generation boundary exceptions

Raised by providers. The explanation service recovers from all of them with
a fixed fallback sentence; the decision cycle turns a failed proposal into
an echo action. None reaches the user.
"""

from __future__ import annotations

from typing import Optional


class LLMError(Exception):
    """A generation request failed and will not be retried."""

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.request_id = request_id

    def __str__(self) -> str:
        if self.request_id:
            return f"{self.message} [request_id={self.request_id}]"
        return self.message


class ProviderUnavailableError(LLMError):
    """The provider client could not be constructed (missing key, bad setup)."""

    def __init__(self, provider: str, message: Optional[str] = None):
        super().__init__(message or f"Generation provider '{provider}' is unavailable")
        self.provider = provider


class TransientError(LLMError):
    """Rate limits, overload and connection drops. Retried by the base provider."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message, request_id=request_id)
        self.original_error = original_error


class TimeoutError(TransientError):
    """A single attempt exceeded the provider timeout."""

    def __init__(self, timeout_seconds: float, request_id: Optional[str] = None):
        super().__init__(f"Request timed out after {timeout_seconds}s", request_id=request_id)
        self.timeout_seconds = timeout_seconds
