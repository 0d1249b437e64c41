from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from duebook.schemas.common import CamelModel

PHONE_PATTERN = r"^\d{10}$"


class CustomerCreate(CamelModel):
    shop_id: int
    name: str = Field(min_length=2, max_length=100)
    entity_name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    phone: str = Field(pattern=PHONE_PATTERN)
    opening_balance: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("name", "entity_name", "phone", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class CustomerUpdate(CamelModel):
    """
    Profile update. current_balance overwrites the running balance directly
    without a ledger entry; omit it to leave the balance untouched.
    """
    name: str = Field(min_length=2, max_length=100)
    entity_name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    phone: str = Field(pattern=PHONE_PATTERN)
    shop_id: Optional[int] = None
    current_balance: Optional[Decimal] = None
    is_active: Optional[bool] = None

    @field_validator("name", "entity_name", "phone", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class CustomerBrief(CamelModel):
    id: int
    name: str
    phone: str


class CustomerResponse(CamelModel):
    id: int
    shop_id: int
    name: str
    entity_name: Optional[str] = None
    phone: str
    opening_balance: float
    current_balance: float
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerSummaryResponse(CamelModel):
    total_customers: int
    active_customers: int
    total_opening_balance: float
    total_current_balance: float
