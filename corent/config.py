"""Configuration for corent processes.

Every setting has a default usable on a developer machine; ``from_env``
overrides them from environment variables.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from corent.exceptions import ConfigurationError


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid numeric setting {name}={raw!r}") from e


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes")


@dataclass
class KafkaConfig:
    """Producer settings for ledger events."""

    bootstrap_servers: str = "localhost:9092"
    client_id: str = "corent-ledger"
    acks: str = "all"
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3
    topic_prefix: str = "corent"

    def to_dict(self) -> dict[str, Any]:
        """Settings in confluent-kafka naming."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "client.id": self.client_id,
            "acks": self.acks,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }

    def topic(self, name: str) -> str:
        """Full topic name of an event family, e.g. ``corent.transactions``."""
        return f"{self.topic_prefix}.{name}"


@dataclass
class PostgresConfig:
    """Connection to the database holding properties, roommates and transactions."""

    host: str = "localhost"
    port: int = 5432
    database: str = "corent"
    user: str = "postgres"
    password: str = "postgres"
    connect_timeout: int = 10

    @property
    def connection_string(self) -> str:
        return (
            f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
            f"?connect_timeout={self.connect_timeout}"
        )


@dataclass
class OutputConfig:
    """Where dashboard exports are written."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class LedgerConfig:
    """Parameters of the dashboard computations.

    Attributes
    ----------
    cash_flow_months : int
        Months shown in the cash flow history, current month included.
    revenue_growth, expense_growth : float
        Monthly growth factors applied to projections.
    projected_months : int
        Future months appended when projections are requested.
    """

    cash_flow_months: int = 6
    revenue_growth: float = 1.05
    expense_growth: float = 1.03
    projected_months: int = 2

    def __post_init__(self) -> None:
        if self.cash_flow_months < 1:
            raise ConfigurationError("cash_flow_months must be at least 1")
        if self.projected_months < 0:
            raise ConfigurationError("projected_months cannot be negative")


@dataclass
class CorentConfig:
    """Top-level configuration."""

    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    log_level: str = "INFO"
    log_format: str = "standard"
    publish_events: bool = False

    @classmethod
    def from_env(cls) -> "CorentConfig":
        """Build the configuration from environment variables.

        Raises
        ------
        ConfigurationError
            If a numeric variable does not parse or a value is out of range.
        """
        return cls(
            kafka=KafkaConfig(
                bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
                acks=os.getenv("KAFKA_ACKS", "all"),
                topic_prefix=os.getenv("CORENT_TOPIC_PREFIX", "corent"),
            ),
            postgres=PostgresConfig(
                host=os.getenv("POSTGRES_HOST", "localhost"),
                port=_env_int("POSTGRES_PORT", 5432),
                database=os.getenv("POSTGRES_DB", "corent"),
                user=os.getenv("POSTGRES_USER", "postgres"),
                password=os.getenv("POSTGRES_PASSWORD", "postgres"),
                connect_timeout=_env_int("POSTGRES_CONNECT_TIMEOUT", 10),
            ),
            output=OutputConfig(
                json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
                pretty_json=_env_bool("PRETTY_JSON"),
            ),
            ledger=LedgerConfig(cash_flow_months=_env_int("CORENT_CASH_FLOW_MONTHS", 6)),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
            publish_events=_env_bool("CORENT_PUBLISH_EVENTS"),
        )
