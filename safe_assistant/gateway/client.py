"""
safe_assistant/gateway/client.py - Authorization service client

Async HTTP client for the authorization/execution service. Responses are
handed to the Decision Normalizer; this module only owns transport.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from .exceptions import GatewayError, GatewayUnavailableError
from .models import AuditSnapshot, AuthorizationOutcome, ExecutionOutcome
from .normalizer import normalize_authorization, normalize_execution

logger = logging.getLogger("gateway.client")

DEFAULT_BASE_URL = "http://localhost:8787"

REQUEST_PATH = "/v1/actions/request"
EXECUTE_PATH = "/v1/actions/execute"
RECEIPT_PATH = "/v1/receipts/{receipt_id}"


class GatewayClient:
    """
    Client for the authorization service.

    Endpoints:
        POST /v1/actions/request  -> authorization decision
        POST /v1/actions/execute  -> execution with a receipt
        GET  /v1/receipts/{id}    -> receipt audit state
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Authorization service URL
            timeout_seconds: Per-request timeout
            client: Pre-built httpx client (tests inject a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
            )
        return self._client

    async def _post(self, path: str, body: Dict[str, Any]) -> Tuple[int, Any]:
        client = self._get_client()
        try:
            response = await client.post(path, json=body)
        except httpx.HTTPError as e:
            logger.error(f"POST {path} failed: {e}")
            raise GatewayUnavailableError(path, e) from e

        try:
            data = response.json()
        except ValueError:
            # Non-JSON body; the normalizer treats it as empty
            data = {}
        return response.status_code, data

    async def request_receipt(
        self,
        agent_id: str,
        action_type: str,
        target_system: str,
        payload: Dict[str, Any],
        policy_context: Optional[Dict[str, Any]] = None,
    ) -> AuthorizationOutcome:
        """
        Ask the authorization service whether an action may execute.

        Raises:
            GatewayUnavailableError: On transport failure
        """
        body: Dict[str, Any] = {
            "agent_id": agent_id,
            "action_type": action_type,
            "target_system": target_system,
            "payload": payload,
        }
        if policy_context:
            body["policy_context"] = policy_context

        status_code, data = await self._post(REQUEST_PATH, body)
        outcome = normalize_authorization(status_code, data)
        logger.info(
            f"Authorization {outcome.decision.value} "
            f"(status={status_code}, action={action_type})"
        )
        return outcome

    async def execute_with_receipt(
        self,
        receipt_id: str,
        agent_id: str,
        payload: Dict[str, Any],
    ) -> ExecutionOutcome:
        """Execute a previously authorized action."""
        status_code, data = await self._post(
            EXECUTE_PATH,
            {"receipt_id": receipt_id, "agent_id": agent_id, "payload": payload},
        )
        outcome = normalize_execution(status_code, data)
        logger.info(f"Execution executed={outcome.executed} (status={status_code})")
        return outcome

    async def fetch_receipt(self, receipt_id: str) -> AuditSnapshot:
        """
        Fetch a receipt's audit state. Used for display only.

        Raises:
            GatewayUnavailableError: On transport failure
            GatewayError: On a non-2xx or non-JSON response
        """
        path = RECEIPT_PATH.format(receipt_id=receipt_id)
        client = self._get_client()
        try:
            response = await client.get(path)
        except httpx.HTTPError as e:
            raise GatewayUnavailableError(path, e) from e

        if not response.is_success:
            raise GatewayError(f"GET {path} returned {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            raise GatewayError(f"GET {path} returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise GatewayError(f"GET {path} returned an unexpected body")
        return AuditSnapshot.from_receipt(data)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
