"""
tests/unit/test_gateway_client.py - Authorization service client tests
"""

import json

import httpx
import pytest

from safe_assistant.gateway.client import GatewayClient
from safe_assistant.gateway.exceptions import GatewayError, GatewayUnavailableError
from safe_assistant.gateway.models import Decision


def _client(handler) -> GatewayClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://gateway.test")
    return GatewayClient(base_url="http://gateway.test", client=http)


class TestRequestReceipt:
    """Tests for authorization requests."""

    @pytest.mark.asyncio
    async def test_sends_action_body(self):
        """The request body carries agent, action, target and payload."""
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"decision": "ALLOW", "receipt_id": "r-1"})

        client = _client(handler)
        outcome = await client.request_receipt(
            agent_id="agent-1",
            action_type="payment.create",
            target_system="stripe_sim",
            payload={"amount": 20},
        )

        assert seen["path"] == "/v1/actions/request"
        assert seen["body"] == {
            "agent_id": "agent-1",
            "action_type": "payment.create",
            "target_system": "stripe_sim",
            "payload": {"amount": 20},
        }
        assert outcome.decision is Decision.ALLOW
        assert outcome.receipt_id == "r-1"

    @pytest.mark.asyncio
    async def test_non_json_body_is_deny(self):
        """An unparseable 200 response denies."""
        client = _client(lambda request: httpx.Response(200, text="<html>ok</html>"))

        outcome = await client.request_receipt("a", "payment.create", "stripe_sim", {})

        assert outcome.decision is Decision.DENY

    @pytest.mark.asyncio
    async def test_server_error_is_deny(self):
        client = _client(lambda request: httpx.Response(500, json={"decision": "ALLOW"}))

        outcome = await client.request_receipt("a", "payment.create", "stripe_sim", {})

        assert outcome.decision is Decision.DENY

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self):
        """Connection failures are reported, not classified."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = _client(handler)

        with pytest.raises(GatewayUnavailableError) as exc_info:
            await client.request_receipt("a", "payment.create", "stripe_sim", {})

        assert exc_info.value.path == "/v1/actions/request"


class TestExecuteAndAudit:
    """Tests for execution and receipt audit."""

    @pytest.mark.asyncio
    async def test_execute_then_replay(self, gateway_client):
        """A receipt executes once; the second use is refused."""
        outcome = await gateway_client.request_receipt(
            "a", "payment.create", "stripe_sim", {"amount": 5}
        )
        receipt_id = outcome.require_receipt()

        first = await gateway_client.execute_with_receipt(receipt_id, "a", {"amount": 5})
        second = await gateway_client.execute_with_receipt(receipt_id, "a", {"amount": 5})

        assert first.executed
        assert not second.executed
        assert second.status_code == 409

    @pytest.mark.asyncio
    async def test_fetch_receipt(self, gateway_client):
        outcome = await gateway_client.request_receipt(
            "a", "payment.create", "stripe_sim", {"amount": 5}
        )
        await gateway_client.execute_with_receipt(outcome.receipt_id, "a", {"amount": 5})

        audit = await gateway_client.fetch_receipt(outcome.receipt_id)

        assert audit.state == "executed"
        assert audit.signature_valid == "True"
        assert audit.was_executed

    @pytest.mark.asyncio
    async def test_fetch_missing_receipt_raises(self, gateway_client):
        with pytest.raises(GatewayError):
            await gateway_client.fetch_receipt("does-not-exist")

    @pytest.mark.asyncio
    async def test_fetch_non_object_body_raises(self):
        client = _client(lambda request: httpx.Response(200, json=["executed"]))

        with pytest.raises(GatewayError):
            await client.fetch_receipt("r-1")

    @pytest.mark.asyncio
    async def test_close(self, gateway_client):
        await gateway_client.close()
        await gateway_client.close()
