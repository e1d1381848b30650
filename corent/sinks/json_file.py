"""File sink: events as JSON Lines, dashboard exports as JSON documents."""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from corent.exceptions import SinkError
from corent.models import Event
from corent.sinks.serialization import to_json

logger = logging.getLogger(__name__)

EVENTS_FILE = "events.jsonl"


class JsonFileSink:
    """Publish events and export snapshots under one directory.

    Parameters
    ----------
    output_dir : str | Path
        Target directory, created if missing.
    pretty : bool
        Indent exported documents. Event lines are always compact.
    """

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def publish(self, event: Event) -> None:
        """Append one event to ``events.jsonl``."""
        self._write(self.output_dir / EVENTS_FILE, to_json(event) + "\n", mode="a")
        self._counts["events"] = self._counts.get("events", 0) + 1

    def write_batch(self, name: str, records: Iterable[Any]) -> Path:
        """Export records (alerts, cash flow months...) to ``<name>.json``."""
        records = list(records)
        file_path = self.output_dir / f"{name}.json"
        self._write(file_path, to_json(records, pretty=self.pretty), mode="w")
        self._counts[name] = len(records)
        logger.debug("Exported %d %s to %s", len(records), name, file_path)
        return file_path

    @property
    def counts(self) -> dict[str, int]:
        return dict(self._counts)

    def close(self) -> None:
        """Print what was written."""
        print(f"JSON files written to: {self.output_dir}")
        for name, count in self._counts.items():
            print(f"  {name}: {count} records")

    def _write(self, file_path: Path, text: str, mode: str) -> None:
        try:
            with open(file_path, mode, encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise SinkError(f"Cannot write {file_path}: {e}") from e
