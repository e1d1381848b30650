"""Roommate (colocataire) model."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from corent.models.enums import RoommateStatus


@dataclass
class Roommate:
    """Tenant renting a room in a property."""

    roommate_id: str
    property_id: str  # propriete_id
    status: RoommateStatus
    rent_amount: Decimal  # montant_loyer, expected every month
    entry_date: date | None = None  # date_entree
    exit_date: date | None = None  # date_sortie

    first_name: str = ""  # prenom
    last_name: str = ""  # nom
    email: str | None = None
    phone: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == RoommateStatus.ACTIVE

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
