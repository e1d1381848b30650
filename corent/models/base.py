"""Event envelope published by the ledger."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class Event:
    """Something that happened to a ledger entity.

    ``event_type`` reads ``entity.action`` (``transaction.created``) and
    ``subject`` is the ID of the entity concerned.
    """

    event_id: str
    event_type: str
    event_time: datetime
    source: str
    subject: str
    data: dict[str, Any]
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        event_type: str,
        subject: str,
        data: dict[str, Any],
        source: str = "corent",
        **metadata: Any,
    ) -> "Event":
        """New event with a random ID, stamped now (UTC)."""
        return cls(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            event_time=datetime.now(timezone.utc),
            source=source,
            subject=subject,
            data=data,
            metadata=metadata,
        )
