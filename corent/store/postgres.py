"""PostgreSQL store backed by psycopg."""

import logging
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from corent.config import PostgresConfig
from corent.exceptions import StoreError
from corent.store.base import split_filter
from corent.store.records import PROPERTIES, ROOMMATES, TRANSACTIONS

logger = logging.getLogger(__name__)

COLLECTIONS = (PROPERTIES, ROOMMATES, TRANSACTIONS)

SQL_OPERATORS = {
    "eq": "=",
    "gte": ">=",
    "gt": ">",
    "lte": "<=",
    "lt": "<",
}

# One automatic transaction per property, month and category. Together with
# ``ON CONFLICT DO NOTHING`` this closes the race between two sessions
# generating the same mortgage transaction.
AUTOMATIC_TRANSACTION_INDEX = """
CREATE UNIQUE INDEX IF NOT EXISTS transactions_new_automatic_period_uq
    ON transactions_new (propriete_id, (date_trunc('month', date::timestamp)), categorie)
    WHERE est_automatique
"""


def build_select(collection: str, filters: dict[str, Any]) -> tuple[sql.Composed, list[Any]]:
    """Build a ``SELECT *`` statement and its parameters."""
    if collection not in COLLECTIONS:
        raise StoreError(f"Unknown collection: {collection}")

    clauses: list[sql.Composable] = []
    params: list[Any] = []
    for name, value in filters.items():
        column, op = split_filter(name)
        ident = sql.Identifier(column)
        if op == "in":
            clauses.append(sql.SQL("{} = ANY({})").format(ident, sql.Placeholder()))
            params.append(list(value))
        elif op == "eq" and value is None:
            clauses.append(sql.SQL("{} IS NULL").format(ident))
        else:
            clauses.append(
                sql.SQL("{} {} {}").format(ident, sql.SQL(SQL_OPERATORS[op]), sql.Placeholder())
            )
            params.append(value)

    query = sql.SQL("SELECT * FROM {}").format(sql.Identifier(collection))
    if clauses:
        query = sql.SQL("{} WHERE {}").format(query, sql.SQL(" AND ").join(clauses))
    return query, params


def build_insert(
    collection: str, record: dict[str, Any], ignore_conflicts: bool = False
) -> tuple[sql.Composed, list[Any]]:
    """Build an ``INSERT ... RETURNING id`` statement and its parameters."""
    if collection not in COLLECTIONS:
        raise StoreError(f"Unknown collection: {collection}")

    columns = list(record)
    query = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
        sql.Identifier(collection),
        sql.SQL(", ").join(sql.Identifier(c) for c in columns),
        sql.SQL(", ").join(sql.Placeholder() for _ in columns),
    )
    if ignore_conflicts:
        query = sql.SQL("{} ON CONFLICT DO NOTHING").format(query)
    query = sql.SQL("{} RETURNING id").format(query)
    return query, [record[c] for c in columns]


class PostgresStore:
    """Store reading and writing the backend tables directly."""

    def __init__(self, config: PostgresConfig | str) -> None:
        """Initialize the store.

        Parameters
        ----------
        config : PostgresConfig | str
            Connection configuration or a connection string.
        """
        if isinstance(config, PostgresConfig):
            config = config.connection_string
        self.conninfo = config
        self._conn: psycopg.Connection | None = None

    def connect(self) -> psycopg.Connection:
        """Open the connection on first use."""
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg.connect(self.conninfo, row_factory=dict_row, autocommit=True)
            except psycopg.Error as e:
                raise StoreError(f"Cannot connect to PostgreSQL: {e}") from e
        return self._conn

    def ensure_constraints(self) -> None:
        """Create the uniqueness index for automatic transactions."""
        self._execute(sql.SQL(AUTOMATIC_TRANSACTION_INDEX), [])
        logger.info("Automatic transaction uniqueness index ensured")

    def query(self, collection: str, **filters: Any) -> list[dict[str, Any]]:
        query, params = build_select(collection, filters)
        return self._execute(query, params)

    def insert(self, collection: str, record: dict[str, Any]) -> str:
        query, params = build_insert(collection, record)
        rows = self._execute(query, params)
        return str(rows[0]["id"])

    def insert_if_absent(self, collection: str, record: dict[str, Any]) -> str | None:
        query, params = build_insert(collection, record, ignore_conflicts=True)
        rows = self._execute(query, params)
        if not rows:
            logger.debug("Insert into %s skipped: unique key already present", collection)
            return None
        return str(rows[0]["id"])

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "PostgresStore":
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _execute(self, query: sql.Composable, params: list[Any]) -> list[dict[str, Any]]:
        conn = self.connect()
        try:
            with conn.cursor() as cur:
                cur.execute(query, params)
                if cur.description is None:
                    return []
                return list(cur.fetchall())
        except psycopg.Error as e:
            raise StoreError(f"PostgreSQL error: {e}") from e
