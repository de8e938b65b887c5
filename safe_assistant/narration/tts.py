"""
safe_assistant/narration/tts.py - Speech synthesis

Turns admitted explanation text into audio via the Gemini TTS REST endpoint.
Audio is content-addressed in the NarrationCache. Word timing always comes
from the Alignment Estimator since the provider returns no timestamps.

Upstream failures never raise; the caller gets a text-only result and the
narration still proceeds without audio.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .alignment import (
    AlignmentData,
    estimate_alignment,
    pcm_duration_ms,
    pcm_to_wav,
    wav_duration_ms,
)
from .audio_cache import NarrationCache, narration_cache_key

logger = logging.getLogger("narration.tts")

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TTS_MODEL = "gemini-2.5-flash-preview-tts"
DEFAULT_VOICE = "Kore"

SOURCE_CACHE = "cache"
SOURCE_PROVIDER = "provider"
SOURCE_DISABLED = "disabled"
SOURCE_ERROR = "error"


@dataclass
class SpeechResult:
    """Synthesized narration, or a text-only stand-in."""

    content_type: str
    audio: bytes
    alignment: Optional[AlignmentData]
    available: bool
    source: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contentType": self.content_type,
            "audioBase64": base64.b64encode(self.audio).decode("ascii"),
            "alignment": self.alignment.to_dict() if self.alignment else None,
            "ttsAvailable": self.available,
            "ttsSource": self.source,
            "error": self.error,
        }


class SynthesisError(Exception):
    """Raised internally when the provider response is unusable."""


class SpeechSynthesizer:
    """
    Gemini TTS client with narration caching.

    The API key is sent in the ``x-goog-api-key`` header, never in the URL.
    """

    def __init__(
        self,
        cache: NarrationCache,
        api_key: str = "",
        model: str = DEFAULT_TTS_MODEL,
        voice: str = DEFAULT_VOICE,
        enabled: bool = True,
        timeout_seconds: float = 60.0,
        base_url: str = GEMINI_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.cache = cache
        self.model = model
        self.voice = voice
        self.enabled = enabled
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_seconds)
        return self._client

    async def synthesize(
        self,
        text: str,
        voice: Optional[str] = None,
        want_alignment: bool = True,
    ) -> SpeechResult:
        """
        Synthesize ``text``, serving from cache when possible.

        Args:
            text: Text to speak (already validated upstream)
            voice: Voice override
            want_alignment: Include estimated word timing

        Returns:
            SpeechResult; ``available`` is False when no audio could be made
        """
        if not self.enabled:
            return SpeechResult(
                content_type="text/plain",
                audio=b"",
                alignment=None,
                available=False,
                source=SOURCE_DISABLED,
                error="TTS is disabled",
            )

        resolved_voice = voice or self.voice
        key = narration_cache_key(text, self.model, resolved_voice)

        cached = self.cache.get(key)
        if cached is not None:
            return SpeechResult(
                content_type="audio/wav",
                audio=cached,
                alignment=self._alignment(text, wav_duration_ms(cached), want_alignment),
                available=True,
                source=SOURCE_CACHE,
            )

        try:
            pcm = await self._request_pcm(text, resolved_voice)
        except (httpx.HTTPError, SynthesisError) as e:
            logger.error(f"TTS synthesis failed: {e}")
            return self._text_only(text)

        wav = pcm_to_wav(pcm)
        self.cache.set(key, wav)

        logger.info(
            f"provider=gemini, model={self.model}, text_length={len(text)}, "
            f"alignment_available=false"
        )
        return SpeechResult(
            content_type="audio/wav",
            audio=wav,
            alignment=self._alignment(text, pcm_duration_ms(len(pcm)), want_alignment),
            available=True,
            source=SOURCE_PROVIDER,
        )

    async def _request_pcm(self, text: str, voice: str) -> bytes:
        body = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {
                        "prebuiltVoiceConfig": {"voiceName": voice},
                    },
                },
            },
        }
        response = await self._get_client().post(
            f"{self.base_url}/models/{self.model}:generateContent",
            headers={"x-goog-api-key": self._api_key},
            json=body,
        )
        if not response.is_success:
            raise SynthesisError(f"status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise SynthesisError("response is not JSON") from e

        return _extract_pcm(data)

    def _alignment(
        self,
        text: str,
        duration_ms: Optional[float],
        want_alignment: bool,
    ) -> Optional[AlignmentData]:
        if not want_alignment:
            return None
        alignment = estimate_alignment(text)
        if duration_ms is not None:
            alignment = alignment.rescaled(duration_ms)
        return alignment

    def _text_only(self, text: str) -> SpeechResult:
        return SpeechResult(
            content_type="text/plain",
            audio=b"",
            alignment=estimate_alignment(text),
            available=False,
            source=SOURCE_ERROR,
            error="TTS unavailable",
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _extract_pcm(data: Any) -> bytes:
    """Pull base64 PCM out of a generateContent response."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        raise SynthesisError("no parts in TTS response") from e

    for part in parts or []:
        inline = part.get("inlineData") if isinstance(part, dict) else None
        if inline and inline.get("data"):
            try:
                return base64.b64decode(inline["data"])
            except ValueError as e:
                raise SynthesisError("inlineData is not valid base64") from e

    raise SynthesisError("no inlineData in TTS response parts")
