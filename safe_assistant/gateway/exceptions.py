"""
safe_assistant/gateway/exceptions.py - Authorization boundary exceptions

Ambiguous or denying responses are never exceptions; they normalize to DENY.
These cover transport failures and contract violations only.
"""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base exception for authorization service operations."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class GatewayUnavailableError(GatewayError):
    """Raised when the authorization service cannot be reached."""

    def __init__(
        self,
        path: str,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(f"Authorization service unreachable at {path}")
        self.path = path
        self.original_error = original_error


class ReceiptIntegrityError(GatewayError):
    """Raised when an ALLOW decision does not carry a usable receipt id."""

    def __init__(self, receipt_id: Optional[str] = None):
        super().__init__("ALLOW decision is missing a receipt id")
        self.receipt_id = receipt_id
