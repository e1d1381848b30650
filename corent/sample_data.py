"""Synthetic rental portfolios for demos and tests."""

from datetime import date
from decimal import Decimal
from typing import Any

from faker import Faker

from corent.models import (
    RENT_CATEGORY,
    Period,
    PropertyStatus,
    RoommateStatus,
    TransactionStatus,
    TransactionType,
)
from corent.models.period import last_periods
from corent.store.base import Store
from corent.store.records import PROPERTIES, ROOMMATES, TRANSACTIONS

PROPERTY_TYPES = ["appartement", "maison", "studio"]
EXPENSE_CATEGORIES = ["travaux", "charges", "assurance", "taxe foncière", "entretien"]


def _shift_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:  # February 29th
        return day.replace(year=day.year + years, day=28)


class PortfolioGenerator:
    """Generate rows for properties, roommates and their transactions.

    Rows use the backend column names and can be inserted as-is in any
    ``Store``.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``fr_FR``).
    """

    def __init__(self, seed: int | None = None, locale: str = "fr_FR") -> None:
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)

    def property_row(self, user_id: str, as_of: date, with_mortgage: bool = True) -> dict[str, Any]:
        """Generate a ``proprietes`` row, optionally financed by a mortgage."""
        city = self.fake.city()
        row: dict[str, Any] = {
            "id": self.fake.uuid4(),
            "user_id": user_id,
            "nom": f"Coloc {city}",
            "adresse": self.fake.street_address(),
            "ville": city,
            "code_postal": self.fake.postcode(),
            "pays": "France",
            "type": self.fake.random_element(PROPERTY_TYPES),
            "nombre_chambres": self.fake.random_int(2, 6),
            "statut": PropertyStatus.ACTIVE.value,
            "prix_acquisition": Decimal(self.fake.random_int(120, 600) * 1000),
        }
        if with_mortgage:
            start = self.fake.date_between(
                start_date=_shift_years(as_of, -10), end_date=as_of
            )
            row.update(
                {
                    "credit_mensuel": Decimal(self.fake.random_int(40, 160) * 10),
                    "jour_prelevement_credit": self.fake.random_int(1, 28),
                    "date_debut_credit": start,
                    "date_fin_credit": _shift_years(start, 20),
                }
            )
        return row

    def roommate_row(self, property_id: str, as_of: date, active: bool = True) -> dict[str, Any]:
        """Generate a ``colocataires`` row."""
        first_name = self.fake.first_name()
        last_name = self.fake.last_name()
        entry = self.fake.date_between(start_date=_shift_years(as_of, -2), end_date=as_of)
        return {
            "id": self.fake.uuid4(),
            "propriete_id": property_id,
            "prenom": first_name,
            "nom": last_name,
            "email": self.fake.email(),
            "telephone": self.fake.phone_number(),
            "montant_loyer": Decimal(self.fake.random_int(35, 80) * 10),
            "statut": (RoommateStatus.ACTIVE if active else RoommateStatus.INACTIVE).value,
            "date_entree": entry,
            "date_sortie": None if active else as_of,
        }

    def rent_rows(
        self,
        roommate: dict[str, Any],
        as_of: date,
        months: int = 6,
        payment_rate: float = 0.85,
    ) -> list[dict[str, Any]]:
        """Rent payments of a roommate over the last ``months`` months.

        Each month is paid with probability ``payment_rate``; payments are
        never dated after ``as_of``.
        """
        rows = []
        for period in last_periods(Period.of(as_of), months):
            if self.fake.random.random() >= payment_rate:
                continue
            day = period.day(self.fake.random_int(1, 10))
            if day > as_of:
                continue
            rows.append(
                {
                    "id": self.fake.uuid4(),
                    "propriete_id": roommate["propriete_id"],
                    "colocataire_id": roommate["id"],
                    "type": TransactionType.REVENUE.value,
                    "montant": roommate["montant_loyer"],
                    "date": day,
                    "statut": TransactionStatus.COMPLETED.value,
                    "categorie": RENT_CATEGORY,
                    "description": f"Loyer {roommate['prenom']} {roommate['nom']} - {period.label()}",
                    "est_automatique": False,
                }
            )
        return rows

    def expense_rows(
        self, property_id: str, as_of: date, months: int = 6, per_month: int = 1
    ) -> list[dict[str, Any]]:
        """Miscellaneous expenses (never mortgage) over the last ``months`` months."""
        rows = []
        for period in last_periods(Period.of(as_of), months):
            for _ in range(per_month):
                day = period.day(self.fake.random_int(1, 28))
                if day > as_of:
                    continue
                category = self.fake.random_element(EXPENSE_CATEGORIES)
                rows.append(
                    {
                        "id": self.fake.uuid4(),
                        "propriete_id": property_id,
                        "type": TransactionType.EXPENSE.value,
                        "montant": Decimal(self.fake.random_int(20, 400)),
                        "date": day,
                        "statut": TransactionStatus.COMPLETED.value,
                        "categorie": category,
                        "description": f"{category.capitalize()} - {period.label()}",
                        "est_automatique": False,
                    }
                )
        return rows

    def populate(
        self,
        store: Store,
        user_id: str,
        as_of: date,
        num_properties: int = 2,
        roommates_per_property: int = 3,
        months: int = 6,
    ) -> dict[str, int]:
        """Fill ``store`` with a portfolio for ``user_id``.

        No mortgage payments are generated: the ledger creates those.
        """
        counts = {PROPERTIES: 0, ROOMMATES: 0, TRANSACTIONS: 0}
        for index in range(num_properties):
            prop = self.property_row(user_id, as_of, with_mortgage=index % 2 == 0)
            store.insert(PROPERTIES, prop)
            counts[PROPERTIES] += 1

            for _ in range(roommates_per_property):
                roommate = self.roommate_row(prop["id"], as_of)
                store.insert(ROOMMATES, roommate)
                counts[ROOMMATES] += 1
                for row in self.rent_rows(roommate, as_of, months):
                    store.insert(TRANSACTIONS, row)
                    counts[TRANSACTIONS] += 1

            for row in self.expense_rows(prop["id"], as_of, months):
                store.insert(TRANSACTIONS, row)
                counts[TRANSACTIONS] += 1
        return counts
