from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from duebook.models.enums import LedgerEntryType
from duebook.schemas.common import CamelModel
from duebook.schemas.customer import CustomerBrief
from duebook.schemas.user import UserSummary


class LedgerEntryCreate(CamelModel):
    customer_id: int
    entry_type: LedgerEntryType
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = Field(default=None, max_length=500)
    entry_date: Optional[date] = None

    @field_validator("entry_type")
    @classmethod
    def no_manual_reversals(cls, v: LedgerEntryType) -> LedgerEntryType:
        if v == LedgerEntryType.REVERSAL:
            raise ValueError("Use the reverse endpoint to create a REVERSAL entry")
        return v


class LedgerReverseRequest(CamelModel):
    notes: Optional[str] = Field(default=None, max_length=500)


class LedgerEntryResponse(CamelModel):
    id: int
    customer_id: int
    shop_id: int
    entry_type: LedgerEntryType
    amount: float
    balance_after: float
    reference_entry_id: Optional[int] = None
    notes: Optional[str] = None
    entry_date: date
    created_at: Optional[datetime] = None
    created_by_user: Optional[UserSummary] = None
    customer: Optional[CustomerBrief] = None


class LedgerSummaryResponse(CamelModel):
    total_debit: float
    total_credit: float
    net_balance: float
    total_entries: int
