"""
safe_assistant/llm/providers/base.py - Base provider

Abstract base class for generation providers with built-in:
- Per-request timeout
- Retry with exponential backoff on transient failures
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from ..protocol import LLMResponse, LLMOptions
from ..exceptions import (
    LLMError,
    TimeoutError as LLMTimeoutError,
    TransientError,
)

logger = logging.getLogger("llm.provider")


def strip_code_fences(content: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    content = content.strip()
    if content.startswith("```"):
        content = content.split("```")[1]
        if content.startswith("json"):
            content = content[4:]
        content = content.strip()
    return content


class BaseProvider(ABC):
    """
    Abstract base class for generation providers.

    Subclasses implement ``_raw_complete``; this class owns timeouts and
    retries and tags each response with latency and a request id.
    """

    def __init__(
        self,
        model: str,
        max_tokens: int = 1024,
        temperature: float = 0.4,
        timeout_seconds: float = 30.0,
        retry_attempts: int = 2,
        retry_delay_ms: int = 1000,
    ):
        """
        Initialize the base provider.

        Args:
            model: Model identifier
            max_tokens: Default max completion tokens
            temperature: Default temperature
            timeout_seconds: Request timeout
            retry_attempts: Number of retries after the first attempt
            retry_delay_ms: Base delay between retries
        """
        self.model = model
        self.default_max_tokens = max_tokens
        self.default_temperature = temperature
        self.timeout_seconds = timeout_seconds
        self.retry_attempts = retry_attempts
        self.retry_delay_ms = retry_delay_ms

        self._available = True

    @abstractmethod
    async def _raw_complete(
        self,
        prompt: str,
        system_prompt: Optional[str],
        options: LLMOptions,
    ) -> LLMResponse:
        """Make the actual API call. Implemented by subclasses."""
        ...

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        options: Optional[LLMOptions] = None,
    ) -> LLMResponse:
        """
        Generate a completion with timeout and retry.

        Args:
            prompt: User prompt
            system_prompt: System instructions
            options: Completion options

        Returns:
            LLMResponse

        Raises:
            LLMError: When every attempt failed
        """
        opts = (options or LLMOptions()).merge_with_defaults(
            self.default_max_tokens,
            self.default_temperature,
            self.timeout_seconds,
        )
        request_id = str(uuid.uuid4())[:8]

        last_error: Optional[Exception] = None
        start_time = time.monotonic()

        for attempt in range(self.retry_attempts + 1):
            try:
                response = await asyncio.wait_for(
                    self._raw_complete(prompt, system_prompt, opts),
                    timeout=opts.timeout_seconds,
                )

                response.latency_ms = int((time.monotonic() - start_time) * 1000)
                response.request_id = request_id
                logger.debug(
                    f"request_id={request_id} model={response.model} "
                    f"tokens={response.total_tokens} latency_ms={response.latency_ms}"
                )
                return response

            except asyncio.TimeoutError:
                last_error = LLMTimeoutError(opts.timeout_seconds, request_id)
                logger.warning(f"Request timeout (attempt {attempt + 1})")

            except TransientError as e:
                last_error = e
                logger.warning(f"Transient error (attempt {attempt + 1}): {e}")

            except LLMError:
                # Not retried
                raise

            except Exception as e:
                last_error = TransientError(str(e), e, request_id)
                logger.warning(f"Request error (attempt {attempt + 1}): {e}")

            if attempt < self.retry_attempts:
                delay = self.retry_delay_ms * (2 ** attempt) / 1000
                await asyncio.sleep(delay)

        raise LLMError(
            f"Request failed after {self.retry_attempts + 1} attempts: {last_error}",
            request_id=request_id,
        )

    def is_available(self) -> bool:
        return self._available
