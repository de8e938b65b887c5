"""
safe_assistant/gateway - Authorization boundary

Fail-closed normalization of authorization responses plus the async client
for the authorization/execution service.
"""

from .models import (
    AuditSnapshot,
    AuthorizationOutcome,
    Decision,
    DecisionKind,
    ExecutionOutcome,
)
from .normalizer import normalize_authorization, normalize_execution
from .client import GatewayClient
from .exceptions import (
    GatewayError,
    GatewayUnavailableError,
    ReceiptIntegrityError,
)

__all__ = [
    # Models
    "AuditSnapshot",
    "AuthorizationOutcome",
    "Decision",
    "DecisionKind",
    "ExecutionOutcome",
    # Normalizer
    "normalize_authorization",
    "normalize_execution",
    # Client
    "GatewayClient",
    # Exceptions
    "GatewayError",
    "GatewayUnavailableError",
    "ReceiptIntegrityError",
]
