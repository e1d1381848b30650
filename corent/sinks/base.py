"""Publisher interface shared by the sinks."""

from typing import Protocol

from corent.models import Event


class EventPublisher(Protocol):
    """Destination for ledger events."""

    def publish(self, event: Event) -> None: ...

    def close(self) -> None: ...
