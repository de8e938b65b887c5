"""
safe_assistant/llm/sanitizer.py - Input sanitization

User text is quoted into generation prompts as a fact. These helpers strip
prompt-injection markers from it first.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger("llm.sanitizer")

MAX_FACT_CHARS = 500

# Patterns that could indicate prompt injection attempts
INJECTION_PATTERNS = [
    # Instruction override attempts
    r"(?i)ignore\s+(previous|all|above|prior)\s+(instructions?|rules?)",
    r"(?i)disregard\s+(previous|all|above|prior)\s+(instructions?|rules?)",
    r"(?i)forget\s+(previous|all|above|prior)\s+(instructions?|rules?)",
    r"(?i)new\s+instructions?\s*:",
    # Role/persona manipulation
    r"(?i)you\s+are\s+now\s+",
    r"(?i)pretend\s+to\s+be\s+",
    # Role markers and special tokens
    r"(?i)\b(system|assistant|user|human)\s*:",
    r"(?i)\[/?INST\]",
    r"(?i)<\|(system|user|assistant)\|>",
    r"(?i)<</?SYS>>",
]

_COMPILED = [re.compile(p) for p in INJECTION_PATTERNS]


def sanitize_user_input(text: str) -> str:
    """
    Neutralize injection patterns and quoting characters in user text.

    Args:
        text: Raw user text

    Returns:
        Text safe to quote inside a fact block
    """
    if not text:
        return text

    filtered_count = 0
    for pattern in _COMPILED:
        text, count = pattern.subn("[FILTERED]", text)
        filtered_count += count

    # Keep the fact on one quoted line
    text = text.replace("```", "'''").replace('"', "'")
    text = " ".join(text.split())

    if len(text) > MAX_FACT_CHARS:
        text = text[:MAX_FACT_CHARS] + "..."

    if filtered_count:
        logger.warning(f"Sanitized {filtered_count} potential injection patterns from user input")

    return text

