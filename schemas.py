from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ledger import LedgerSummary
from money import parse_amount


def first_error(exc: ValidationError) -> str:
    """One-line message for the first failure in a pydantic error."""
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    msg = err.get("msg", "Invalid input")
    return f"{loc}: {msg}" if loc else msg


class CategoryIn(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, max_length=20)


class TransactionIn(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    amount: Decimal = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=200)
    date: datetime
    category_id: str = Field(..., min_length=1)

    @field_validator("amount", mode="before")
    @classmethod
    def _exact_amount(cls, value):
        return parse_amount(value)


class TransactionDeleteIn(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    id: str = Field(..., min_length=1)


class _Out(BaseModel):
    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )


class CategoryOut(_Out):
    id: str
    name: str
    color: Optional[str] = None
    owner_id: str
    created_at: datetime


class TransactionOut(_Out):
    id: str
    amount: Decimal
    description: str
    date: datetime
    category_id: str
    owner_id: str
    created_at: datetime
    category: CategoryOut


class LedgerSummaryOut(_Out):
    transactions: dict[str, list[TransactionOut]]
    total: Decimal
    current_month: Optional[str] = None

    @classmethod
    def from_summary(cls, summary: LedgerSummary) -> "LedgerSummaryOut":
        return cls(
            transactions={
                key: [TransactionOut.model_validate(txn) for txn in items]
                for key, items in summary.transactions.items()
            },
            total=summary.total,
            current_month=summary.current_month,
        )


class DeleteResult(BaseModel):
    success: bool = True
