"""
tests/unit/test_audio_cache.py - Narration Cache tests
"""

import hashlib

from safe_assistant.narration.audio_cache import NarrationCache, narration_cache_key


class TestNarrationCacheKey:
    """Tests for content-addressed keys."""

    def test_key_is_sha256_of_text_model_voice(self):
        key = narration_cache_key("Nothing was sent.", "tts-model", "Kore")

        assert key == hashlib.sha256(b"Nothing was sent.|tts-model|Kore").hexdigest()

    def test_voice_changes_key(self):
        assert narration_cache_key("t", "m", "Kore") != narration_cache_key("t", "m", "Puck")


class TestNarrationCache:
    """Tests for file-backed audio caching."""

    def test_set_then_get(self, tmp_path):
        cache = NarrationCache(tmp_path / "tts")

        assert cache.set("abc", b"RIFFdata")
        assert cache.get("abc") == b"RIFFdata"
        assert (tmp_path / "tts" / "abc.wav").exists()

    def test_miss(self, tmp_path):
        cache = NarrationCache(tmp_path)

        assert cache.get("missing") is None

    def test_empty_file_is_a_miss(self, tmp_path):
        (tmp_path / "empty.wav").write_bytes(b"")
        cache = NarrationCache(tmp_path)

        assert cache.get("empty") is None

    def test_disabled(self, tmp_path):
        cache = NarrationCache(tmp_path, enabled=False)

        assert not cache.set("abc", b"data")
        assert cache.get("abc") is None
        assert not (tmp_path / "abc.wav").exists()

    def test_write_failure_is_not_fatal(self, tmp_path):
        """A directory that cannot be created degrades to no caching."""
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"not a directory")
        cache = NarrationCache(blocker / "tts")

        assert not cache.set("abc", b"data")
        assert cache.get("abc") is None

    def test_read_failure_is_a_miss(self, tmp_path, monkeypatch):
        cache = NarrationCache(tmp_path)
        cache.set("abc", b"data")

        def broken_read(self):
            raise OSError("disk error")

        monkeypatch.setattr("pathlib.Path.read_bytes", broken_read)

        assert cache.get("abc") is None
