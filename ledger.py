"""Month bucketing and totals over an owner's transactions.

Everything here is pure: callers pass an already owner-scoped list (as the
store returns it, newest first) and get a ``LedgerSummary`` back. Month
totals are derived from the grouped lists on demand instead of being stored
next to them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from models import Transaction

ZERO = Decimal("0.00")


def month_key(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return f"{value.year:04d}-{value.month:02d}"


def sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((txn.amount for txn in transactions), ZERO)


def group_by_month(
    transactions: Sequence[Transaction],
) -> dict[str, list[Transaction]]:
    grouped: dict[str, list[Transaction]] = {}
    for txn in transactions:
        grouped.setdefault(month_key(txn.date), []).append(txn)
    return grouped


@dataclass
class LedgerSummary:
    transactions: dict[str, list[Transaction]] = field(default_factory=dict)
    total: Decimal = ZERO
    current_month: Optional[str] = None

    @property
    def count(self) -> int:
        return sum(len(items) for items in self.transactions.values())

    @property
    def month_totals(self) -> dict[str, Decimal]:
        return {key: sum_amounts(items) for key, items in self.transactions.items()}

    def month_total(self, key: str) -> Decimal:
        return sum_amounts(self.transactions.get(key, []))

    def sorted_months(self) -> list[str]:
        # zero-padded YYYY-MM sorts chronologically
        return sorted(self.transactions, reverse=True)


def summarize(
    transactions: Sequence[Transaction], current_month: Optional[str] = None
) -> LedgerSummary:
    return LedgerSummary(
        transactions=group_by_month(transactions),
        total=sum_amounts(transactions),
        current_month=current_month,
    )
