"""Tests for SQS client utilities."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from shared.schemas.document import VerificationStatus
from shared.schemas.events import DocumentVerifiedEvent
from shared.utils.sqs import SQSClient


@pytest.fixture
def sqs_client():
    """Create an SQSClient for testing."""
    return SQSClient(
        queue_url="https://sqs.us-east-1.amazonaws.com/123/verification-queue",
        endpoint_url="http://localhost:4566",
    )


def _mock_boto_client(mock_session, message_id: str) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.send_message = AsyncMock(return_value={"MessageId": message_id})
    mock_session.create_client.return_value.__aenter__.return_value = mock_client
    return mock_client


class TestSQSClientInit:
    """Tests for SQSClient initialization."""

    def test_init_defaults(self):
        client = SQSClient(queue_url="https://sqs.us-east-1.amazonaws.com/123/q")

        assert client.region == "us-east-1"
        assert client.endpoint_url is None
        assert client._session is not None

    def test_init_with_all_params(self):
        client = SQSClient(
            queue_url="https://sqs.eu-west-1.amazonaws.com/123/q",
            region="eu-west-1",
            endpoint_url="http://localhost:4566",
        )

        assert client.region == "eu-west-1"
        assert client.endpoint_url == "http://localhost:4566"


class TestSQSClientSendMessage:
    """Tests for SQSClient.send_message."""

    @pytest.mark.asyncio
    async def test_send_registry_event(self, sqs_client):
        """Test a registry notification is sent as its JSON form."""
        with patch.object(sqs_client, "_session") as mock_session:
            mock_client = _mock_boto_client(mock_session, "msg-789")

            event = DocumentVerifiedEvent(
                fingerprint="0x" + "cd" * 32,
                document_hash="0xabc",
                status=VerificationStatus.REJECTED,
                verifier="0xverifier",
                reason="bad scan",
            )
            result = await sqs_client.send_message(event)

            assert result == "msg-789"
            call_kwargs = mock_client.send_message.call_args[1]
            assert call_kwargs["QueueUrl"] == sqs_client.queue_url
            body = json.loads(call_kwargs["MessageBody"])
            assert body["event_type"] == "DocumentVerified"
            assert body["status"] == "rejected"
            assert body["reason"] == "bad scan"

    @pytest.mark.asyncio
    async def test_send_dict(self, sqs_client):
        with patch.object(sqs_client, "_session") as mock_session:
            mock_client = _mock_boto_client(mock_session, "msg-123")

            message = {"event_type": "VerifierAdded", "verifier": "0xv"}
            await sqs_client.send_message(message)

            call_kwargs = mock_client.send_message.call_args[1]
            assert json.loads(call_kwargs["MessageBody"]) == message
            assert "MessageGroupId" not in call_kwargs
            assert "MessageDeduplicationId" not in call_kwargs

    @pytest.mark.asyncio
    async def test_send_with_fifo_params(self, sqs_client):
        with patch.object(sqs_client, "_session") as mock_session:
            mock_client = _mock_boto_client(mock_session, "msg-fifo")

            await sqs_client.send_message(
                message={"data": "test"},
                message_group_id="0xfingerprint",
                deduplication_id="dedup-123",
            )

            call_kwargs = mock_client.send_message.call_args[1]
            assert call_kwargs["MessageGroupId"] == "0xfingerprint"
            assert call_kwargs["MessageDeduplicationId"] == "dedup-123"

    @pytest.mark.asyncio
    async def test_send_failure_propagates(self, sqs_client):
        """Test errors are left to the publisher to handle."""
        with patch.object(sqs_client, "_session") as mock_session:
            mock_client = _mock_boto_client(mock_session, "unused")
            mock_client.send_message.side_effect = Exception("queue unavailable")

            with pytest.raises(Exception, match="queue unavailable"):
                await sqs_client.send_message({"data": "test"})
