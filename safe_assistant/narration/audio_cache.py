"""
safe_assistant/narration/audio_cache.py - Content-addressed narration cache

Persists synthesized audio under a hash of (text, model, voice). Identical
text always resolves to identical audio. Any filesystem failure degrades to
a cache miss; this cache is never fatal.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger("narration.audio_cache")

AUDIO_SUFFIX = ".wav"


def narration_cache_key(text: str, model: str, voice: str) -> str:
    """SHA-256 hex digest of the spoken text plus synthesis model and voice."""
    raw = f"{text}|{model}|{voice}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class NarrationCache:
    """File-backed audio cache, one file per key."""

    def __init__(self, directory: Union[str, Path], enabled: bool = True):
        self.directory = Path(directory)
        self.enabled = enabled

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}{AUDIO_SUFFIX}"

    def get(self, key: str) -> Optional[bytes]:
        """Return cached audio bytes, or None on miss or read failure."""
        if not self.enabled:
            return None

        path = self._path(key)
        try:
            if not path.is_file():
                return None
            audio = path.read_bytes()
        except OSError as e:
            logger.warning(f"Cache read failed for key={key[:16]}: {e}")
            return None

        if not audio:
            return None
        logger.info(f"Cache HIT key={key[:16]} bytes={len(audio)}")
        return audio

    def set(self, key: str, audio: bytes) -> bool:
        """
        Persist audio bytes under ``key``.

        Returns:
            True if written, False if disabled or the write failed
        """
        if not self.enabled:
            return False

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._path(key).write_bytes(audio)
        except OSError as e:
            logger.warning(f"Cache write failed for key={key[:16]}: {e}")
            return False

        logger.info(f"Cache SET key={key[:16]} bytes={len(audio)}")
        return True
