"""Conversion between stored rows and domain entities.

Rows use the backend column names (``nom``, ``credit_mensuel``...). Parsing
fails with ``InvalidRecordError`` as soon as a row does not have the
expected shape, so the ledger only ever sees well-formed entities.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from corent.exceptions import InvalidRecordError
from corent.models import (
    Property,
    PropertyStatus,
    Roommate,
    RoommateStatus,
    Transaction,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)

PROPERTIES = "proprietes"
ROOMMATES = "colocataires_new"
TRANSACTIONS = "transactions_new"

E = TypeVar("E", bound=Enum)

_MISSING = object()


def _get(row: dict[str, Any], collection: str, key: str, required: bool) -> Any:
    value = row.get(key, _MISSING)
    if value is _MISSING or value is None:
        if required:
            raise InvalidRecordError(collection, key, "missing value")
        return None
    return value


def _as_str(row: dict[str, Any], collection: str, key: str, required: bool = True) -> str | None:
    value = _get(row, collection, key, required)
    if value is None:
        return None
    return str(value)


def _as_decimal(
    row: dict[str, Any], collection: str, key: str, required: bool = True
) -> Decimal | None:
    value = _get(row, collection, key, required)
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidRecordError(collection, key, f"not a number: {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidRecordError(collection, key, f"not a number: {value!r}") from e
    if not amount.is_finite():
        raise InvalidRecordError(collection, key, f"not a finite number: {value!r}")
    return amount


def _as_date(row: dict[str, Any], collection: str, key: str, required: bool = True) -> date | None:
    value = _get(row, collection, key, required)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            # Accept both "2024-06-05" and full ISO timestamps
            return date.fromisoformat(value[:10])
        except ValueError as e:
            raise InvalidRecordError(collection, key, f"not a date: {value!r}") from e
    raise InvalidRecordError(collection, key, f"not a date: {value!r}")


def _as_datetime(row: dict[str, Any], collection: str, key: str) -> datetime | None:
    value = _get(row, collection, key, False)
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        raise InvalidRecordError(collection, key, f"not a timestamp: {value!r}") from e


def _as_int(row: dict[str, Any], collection: str, key: str, required: bool = True) -> int | None:
    value = _get(row, collection, key, required)
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidRecordError(collection, key, f"not an integer: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InvalidRecordError(collection, key, f"not an integer: {value!r}") from e


def _as_enum(row: dict[str, Any], collection: str, key: str, enum_type: type[E]) -> E:
    value = _get(row, collection, key, True)
    try:
        return enum_type(value)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_type)
        raise InvalidRecordError(collection, key, f"{value!r} not in ({allowed})") from e


def parse_property(row: dict[str, Any]) -> Property:
    """Build a ``Property`` from a ``proprietes`` row."""
    c = PROPERTIES
    debit_day = _as_int(row, c, "jour_prelevement_credit", required=False)
    if debit_day is not None and not 1 <= debit_day <= 31:
        raise InvalidRecordError(c, "jour_prelevement_credit", f"day {debit_day} out of range 1-31")
    monthly_credit = _as_decimal(row, c, "credit_mensuel", required=False)
    if monthly_credit is not None and monthly_credit < 0:
        raise InvalidRecordError(c, "credit_mensuel", "amount cannot be negative")

    return Property(
        property_id=_as_str(row, c, "id"),
        user_id=_as_str(row, c, "user_id"),
        name=_as_str(row, c, "nom"),
        status=_as_enum(row, c, "statut", PropertyStatus),
        monthly_credit=monthly_credit,
        credit_debit_day=debit_day,
        credit_start_date=_as_date(row, c, "date_debut_credit", required=False),
        credit_end_date=_as_date(row, c, "date_fin_credit", required=False),
        address=_as_str(row, c, "adresse", required=False) or "",
        city=_as_str(row, c, "ville", required=False) or "",
        postal_code=_as_str(row, c, "code_postal", required=False) or "",
        country=_as_str(row, c, "pays", required=False) or "France",
        property_type=_as_str(row, c, "type", required=False) or "",
        bedrooms=_as_int(row, c, "nombre_chambres", required=False) or 0,
        acquisition_price=_as_decimal(row, c, "prix_acquisition", required=False),
        created_at=_as_datetime(row, c, "created_at"),
        updated_at=_as_datetime(row, c, "updated_at"),
    )


def parse_roommate(row: dict[str, Any]) -> Roommate:
    """Build a ``Roommate`` from a ``colocataires`` row."""
    c = ROOMMATES
    rent = _as_decimal(row, c, "montant_loyer")
    if rent < 0:
        raise InvalidRecordError(c, "montant_loyer", "amount cannot be negative")

    return Roommate(
        roommate_id=_as_str(row, c, "id"),
        property_id=_as_str(row, c, "propriete_id"),
        status=_as_enum(row, c, "statut", RoommateStatus),
        rent_amount=rent,
        entry_date=_as_date(row, c, "date_entree", required=False),
        exit_date=_as_date(row, c, "date_sortie", required=False),
        first_name=_as_str(row, c, "prenom", required=False) or "",
        last_name=_as_str(row, c, "nom", required=False) or "",
        email=_as_str(row, c, "email", required=False),
        phone=_as_str(row, c, "telephone", required=False),
        created_at=_as_datetime(row, c, "created_at"),
        updated_at=_as_datetime(row, c, "updated_at"),
    )


def parse_transaction(row: dict[str, Any]) -> Transaction:
    """Build a ``Transaction`` from a ``transactions`` row."""
    c = TRANSACTIONS
    automatic = row.get("est_automatique") or False
    if not isinstance(automatic, bool):
        raise InvalidRecordError(c, "est_automatique", f"not a boolean: {automatic!r}")

    return Transaction(
        transaction_id=_as_str(row, c, "id"),
        property_id=_as_str(row, c, "propriete_id"),
        transaction_type=_as_enum(row, c, "type", TransactionType),
        amount=_as_decimal(row, c, "montant"),
        date=_as_date(row, c, "date"),
        status=_as_enum(row, c, "statut", TransactionStatus),
        category=_as_str(row, c, "categorie", required=False),
        roommate_id=_as_str(row, c, "colocataire_id", required=False),
        description=_as_str(row, c, "description", required=False),
        is_automatic=automatic,
        created_at=_as_datetime(row, c, "created_at"),
        updated_at=_as_datetime(row, c, "updated_at"),
    )


def draft_to_row(draft: TransactionDraft) -> dict[str, Any]:
    """Row to insert in ``transactions`` for a generated draft."""
    return {
        "propriete_id": draft.property_id,
        "colocataire_id": draft.roommate_id,
        "type": draft.transaction_type.value,
        "montant": draft.amount,
        "date": draft.date,
        "statut": draft.status.value,
        "categorie": draft.category,
        "description": draft.description,
        "est_automatique": draft.is_automatic,
    }


def automatic_transaction_key(row: dict[str, Any]) -> tuple[str, str, str] | None:
    """Uniqueness key of an automatic transaction row.

    At most one automatic transaction may exist per property, month and
    category. Rows entered by users (not automatic) have no key.
    """
    if not row.get("est_automatique"):
        return None
    day = _as_date(row, TRANSACTIONS, "date")
    return (
        str(_as_str(row, TRANSACTIONS, "propriete_id")),
        f"{day.year:04d}-{day.month:02d}",
        str(_as_str(row, TRANSACTIONS, "categorie", required=False)),
    )
