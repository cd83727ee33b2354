from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import delete, select
from sqlalchemy.orm import Session, joinedload

from errors import ForbiddenError, NotFoundError, ValidationError
from ledger import LedgerSummary, month_key, summarize
from models import Category, Transaction
from money import AmountLike, amount_to_cents, parse_amount
from periods import MonthPeriod, resolve_month
from schemas import CategoryIn, TransactionIn, first_error

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Food & Dining", "#FF6B6B"),
    ("Transportation", "#4ECDC4"),
    ("Shopping", "#45B7D1"),
    ("Entertainment", "#96CEB4"),
    ("Bills & Utilities", "#FFEAA7"),
    ("Healthcare", "#DDA0DD"),
    ("Education", "#98D8C8"),
    ("Travel", "#6C5CE7"),
)


def _require_owner(owner_id: Any) -> str:
    if not isinstance(owner_id, str) or not owner_id.strip():
        raise ForbiddenError("An authenticated owner is required")
    return owner_id


def _validated(schema: type[BaseModel], data: Union[BaseModel, dict]) -> Any:
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return schema.model_validate(data)
    except SchemaValidationError as exc:
        raise ValidationError(first_error(exc)) from exc


def to_storage_datetime(value: datetime) -> datetime:
    """Stored dates are naive UTC; aware values are converted first."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CategoryService:
    def __init__(self, session: Session, owner_id: str) -> None:
        self.session = session
        self.owner_id = _require_owner(owner_id)

    def list_all(self) -> list[Category]:
        stmt = (
            select(Category)
            .where(Category.owner_id == self.owner_id)
            .order_by(Category.name, Category.id)
        )
        return list(self.session.scalars(stmt).all())

    def get(self, category_id: str) -> Category:
        category = self.session.scalar(
            select(Category).where(
                Category.owner_id == self.owner_id, Category.id == category_id
            )
        )
        if not category:
            raise NotFoundError("Category not found")
        return category

    def create(self, name: str, color: Optional[str] = None) -> Category:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Category name cannot be empty")
        if len(clean_name) > 100:
            raise ValidationError("Category name is too long")

        category = Category(owner_id=self.owner_id, name=clean_name, color=color)
        self.session.add(category)
        self.session.commit()
        self.session.refresh(category)
        logger.info(f"category_created: owner={self.owner_id} id={category.id}")
        return category

    def create_defaults(self) -> list[Category]:
        # no duplicate check: seeding twice yields two full sets
        categories = [
            Category(owner_id=self.owner_id, name=name, color=color)
            for name, color in DEFAULT_CATEGORIES
        ]
        self.session.add_all(categories)
        self.session.commit()
        for category in categories:
            self.session.refresh(category)
        logger.info(
            f"default_categories_created: owner={self.owner_id} count={len(categories)}"
        )
        return categories


class TransactionService:
    def __init__(self, session: Session, owner_id: str) -> None:
        self.session = session
        self.owner_id = _require_owner(owner_id)

    def _scoped(self):
        return (
            select(Transaction)
            .options(joinedload(Transaction.category))
            .where(Transaction.owner_id == self.owner_id)
        )

    def list_all(self) -> list[Transaction]:
        stmt = self._scoped().order_by(Transaction.date.desc(), Transaction.id.desc())
        items = list(self.session.scalars(stmt).all())
        logger.debug(f"transactions_listed: owner={self.owner_id} count={len(items)}")
        return items

    def list_for_period(self, period: MonthPeriod) -> list[Transaction]:
        stmt = (
            self._scoped()
            .where(Transaction.date.between(period.start, period.end))
            .order_by(Transaction.date.desc(), Transaction.id.desc())
        )
        items = list(self.session.scalars(stmt).all())
        logger.debug(
            f"transactions_listed: owner={self.owner_id} month={period.key} "
            f"count={len(items)}"
        )
        return items

    def list_by_month(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        *,
        today: Optional[date] = None,
    ) -> list[Transaction]:
        return self.list_for_period(resolve_month(year, month, today=today))

    def get(self, transaction_id: str) -> Transaction:
        txn = self.session.scalar(self._scoped().where(Transaction.id == transaction_id))
        if not txn:
            raise NotFoundError("Transaction not found")
        return txn

    def create(
        self,
        amount: AmountLike,
        description: str,
        date: datetime,
        category_id: str,
    ) -> Transaction:
        value: Decimal = parse_amount(amount)
        if value <= 0:
            raise ValidationError("Amount must be greater than zero")
        clean_description = (description or "").strip()
        if not clean_description:
            raise ValidationError("Description cannot be empty")
        if len(clean_description) > 200:
            raise ValidationError("Description is too long")
        if not isinstance(date, datetime):
            raise ValidationError("Date must be a date-time")
        if not category_id:
            raise ValidationError("Category is required")

        txn = Transaction(
            owner_id=self.owner_id,
            amount_cents=amount_to_cents(value),
            description=clean_description,
            date=to_storage_datetime(date),
            category_id=category_id,
        )
        self.session.add(txn)
        self.session.commit()
        self.session.refresh(txn)
        logger.info(
            f"transaction_created: owner={self.owner_id} id={txn.id} "
            f"month={month_key(txn.date)}"
        )
        return txn

    def delete(self, transaction_id: str) -> dict[str, bool]:
        # single statement so a concurrent delete also reads as "not found"
        result = self.session.execute(
            delete(Transaction).where(
                Transaction.id == transaction_id,
                Transaction.owner_id == self.owner_id,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError("Transaction not found")
        self.session.commit()
        logger.info(f"transaction_deleted: owner={self.owner_id} id={transaction_id}")
        return {"success": True}


class LedgerService:
    """Public entry point for the ledger procedures.

    The owner id is fixed at construction from the authenticated identity and
    threaded into every store call; no input payload can override it.
    """

    def __init__(self, session: Session, owner_id: str) -> None:
        self.session = session
        self.owner_id = _require_owner(owner_id)
        self.categories = CategoryService(session, self.owner_id)
        self.transactions = TransactionService(session, self.owner_id)

    def get_all(self) -> LedgerSummary:
        return summarize(self.transactions.list_all())

    def get_by_month(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        *,
        today: Optional[date] = None,
    ) -> LedgerSummary:
        period = resolve_month(year, month, today=today)
        items = self.transactions.list_for_period(period)
        return summarize(items, current_month=period.key)

    def create_transaction(self, data: Union[TransactionIn, dict]) -> Transaction:
        payload: TransactionIn = _validated(TransactionIn, data)
        try:
            self.categories.get(payload.category_id)
        except NotFoundError as exc:
            logger.warning(
                f"category_rejected: owner={self.owner_id} "
                f"category={payload.category_id}"
            )
            raise ForbiddenError("Category does not belong to the current user") from exc
        return self.transactions.create(
            payload.amount, payload.description, payload.date, payload.category_id
        )

    def delete_transaction(self, transaction_id: str) -> dict[str, bool]:
        if not isinstance(transaction_id, str) or not transaction_id.strip():
            raise ValidationError("Transaction id is required")
        return self.transactions.delete(transaction_id)

    def list_categories(self) -> list[Category]:
        return self.categories.list_all()

    def create_category(self, data: Union[CategoryIn, dict]) -> Category:
        payload: CategoryIn = _validated(CategoryIn, data)
        return self.categories.create(payload.name, payload.color)

    def seed_default_categories(self) -> list[Category]:
        return self.categories.create_defaults()
