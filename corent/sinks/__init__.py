"""Output sinks for ledger events and exports."""

from corent.sinks.base import EventPublisher
from corent.sinks.json_file import JsonFileSink
from corent.sinks.kafka import KafkaEventSink

__all__ = ["EventPublisher", "JsonFileSink", "KafkaEventSink"]
