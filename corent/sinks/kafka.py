"""Kafka publisher for ledger events."""

import logging
import time
from dataclasses import dataclass, field

from confluent_kafka import KafkaError, KafkaException, Message, Producer

from corent.config import KafkaConfig
from corent.exceptions import SinkError
from corent.models import Event
from corent.sinks.serialization import to_json

logger = logging.getLogger(__name__)

# Entity part of ``event_type`` -> topic name, before the configured prefix
TOPICS = {
    "transaction": "transactions",
    "alert": "alerts",
}


@dataclass
class ProducerStats:
    """Delivery counters of a ``KafkaEventSink``."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0
    start_time: float = field(default_factory=time.time)

    @property
    def success_rate(self) -> float:
        """Delivered share of the acknowledged messages."""
        acknowledged = self.delivered + self.failed
        return self.delivered / acknowledged if acknowledged else 0.0


class KafkaEventSink:
    """Publish ``Event`` envelopes as JSON messages.

    Messages are keyed by property so all events of a property land on the
    same partition, in order.

    Parameters
    ----------
    config : KafkaConfig | str
        Producer configuration, or just the bootstrap servers.
    """

    def __init__(self, config: KafkaConfig | str) -> None:
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)
        self.config = config
        self.producer = Producer(config.to_dict())
        self.stats = ProducerStats()

    def topic_for(self, event: Event) -> str:
        entity = event.event_type.split(".")[0]
        return self.config.topic(TOPICS.get(entity, entity))

    def _on_delivery(self, err: KafkaError | None, msg: Message) -> None:
        if err is not None:
            self.stats.failed += 1
            logger.error("Event delivery to %s failed: %s", msg.topic(), err)
            return
        self.stats.delivered += 1
        logger.debug("Event delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def publish(self, event: Event) -> None:
        """Queue one event for delivery.

        Raises
        ------
        SinkError
            If the producer rejects the message (full queue, fatal error).
        """
        key = event.metadata.get("property_id") or event.subject
        try:
            self.producer.produce(
                topic=self.topic_for(event),
                key=key.encode("utf-8") if key else None,
                value=to_json(event).encode("utf-8"),
                headers={"event_type": event.event_type},
                on_delivery=self._on_delivery,
            )
        except (KafkaException, BufferError) as e:
            raise SinkError(f"Cannot publish {event.event_type}: {e}") from e

        self.stats.sent += 1
        # Serve delivery callbacks of earlier messages
        self.producer.poll(0)

    def flush(self, timeout: float = 30.0) -> int:
        """Wait for queued messages; return how many are still pending."""
        pending = self.producer.flush(timeout)
        if pending:
            logger.warning("%d events still pending after %.0fs", pending, timeout)
        return pending

    def close(self) -> None:
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d delivered=%d failed=%d (%.2fs)",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
            time.time() - self.stats.start_time,
        )
