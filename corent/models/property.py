"""Rental property model."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from corent.models.enums import PropertyStatus


@dataclass
class Property:
    """Property owned by a user, optionally financed by a mortgage."""

    property_id: str
    user_id: str
    name: str  # nom
    status: PropertyStatus

    # Mortgage configuration (credit immobilier)
    monthly_credit: Decimal | None = None  # credit_mensuel
    credit_debit_day: int | None = None  # jour_prelevement_credit, 1-31
    credit_start_date: date | None = None  # date_debut_credit
    credit_end_date: date | None = None  # date_fin_credit

    address: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = "France"
    property_type: str = ""
    bedrooms: int = 0
    acquisition_price: Decimal | None = None  # prix_acquisition

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == PropertyStatus.ACTIVE

    @property
    def has_mortgage(self) -> bool:
        """Whether the mortgage configuration is complete.

        A partially filled configuration does not create an obligation.
        """
        return (
            self.monthly_credit is not None
            and self.credit_debit_day is not None
            and self.credit_start_date is not None
        )
