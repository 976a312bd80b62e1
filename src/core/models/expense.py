"""Pydantic models for expenses and ledger statistics.

Amounts are accepted in major units with at most two decimals and carried
everywhere else as integer minor units (cents).
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import Field, field_validator

from core.models.base import ApiModel

ExpenseCategory = Literal["Transporte", "Alojamiento", "Comida", "Actividades", "Compras", "Otros"]

EXPENSE_CATEGORIES: tuple[str, ...] = ("Transporte", "Alojamiento", "Comida", "Actividades", "Compras", "Otros")

UNCATEGORIZED = "Sin categoría"


def to_minor_units(amount: Decimal) -> int:
    return int(amount * 100)


class ExpenseCreate(ApiModel):
    title: str = Field(..., max_length=200)
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    category: ExpenseCategory | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value

    @property
    def amount_cents(self) -> int:
        return to_minor_units(self.amount)


class ExpenseUpdate(ApiModel):
    title: str | None = Field(default=None, max_length=200)
    amount: Decimal | None = Field(default=None, gt=0, max_digits=14, decimal_places=2)
    category: ExpenseCategory | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value


class ExpenseRead(ApiModel):
    id: uuid.UUID
    trip_id: uuid.UUID
    user_id: str
    title: str
    amount_cents: int
    category: str | None
    created_at: datetime
    updated_at: datetime


class ExpenseStats(ApiModel):
    """Trip totals from the current user's point of view. All money values in cents."""

    total_expenses: int
    user_total_expenses: int
    amount_owed_to_user: int
    total_expense_count: int
    participant_count: int
    average_per_participant: int
    per_user_totals: dict[str, int] = {}
    total_by_category: dict[str, int] = {}
