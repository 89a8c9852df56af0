"""SQS event publisher for committed registry notifications."""

from prometheus_client import Counter

from shared.schemas.events import RegistryEvent
from shared.utils.logging import get_correlation_id, get_logger
from shared.utils.sqs import SQSClient

logger = get_logger(__name__)

# Metrics
EVENTS_PUBLISHED = Counter(
    "verification_events_published_total",
    "Total events published",
    ["event_type"],
)
EVENTS_FAILED = Counter(
    "verification_events_failed_total",
    "Total events that failed to publish",
    ["event_type"],
)


class DocumentEventPublisher:
    """Forwards registry notifications to SQS once their call has committed."""

    def __init__(self, sqs_client: SQSClient | None):
        """Initialize publisher with SQS client.

        Args:
            sqs_client: Configured SQS client, or None to disable forwarding
        """
        self.sqs_client = sqs_client

    async def publish(self, event: RegistryEvent) -> str | None:
        """Publish one notification.

        The registry state is already committed, so a delivery failure is
        counted and logged but never fails the call.

        Args:
            event: Notification raised by a registry operation

        Returns:
            Message ID if successful, None if failed or disabled
        """
        if self.sqs_client is None:
            return None

        if event.correlation_id is None:
            event = event.model_copy(update={"correlation_id": get_correlation_id() or None})

        try:
            message_id = await self.sqs_client.send_message(event)
            EVENTS_PUBLISHED.labels(event_type=event.event_type).inc()
            logger.info(
                "event_published",
                event_type=event.event_type,
                fingerprint=getattr(event, "fingerprint", None),
                message_id=message_id,
            )
            return message_id
        except Exception as e:
            EVENTS_FAILED.labels(event_type=event.event_type).inc()
            logger.error(
                "event_publish_failed",
                event_type=event.event_type,
                fingerprint=getattr(event, "fingerprint", None),
                error=str(e),
            )
            return None

    async def publish_all(self, events: list[RegistryEvent]) -> list[str | None]:
        """Publish notifications in emission order."""
        return [await self.publish(event) for event in events]
