"""Exact-decimal handling for transaction amounts.

Amounts are stored as integer cents and surfaced as ``Decimal`` with two
places. Binary floats are never accepted: ``0.1 + 0.2`` style drift must not
reach a ledger total.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from errors import ValidationError

CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("9999999999.99")

AmountLike = Union[Decimal, int, str]


def parse_amount(value: AmountLike) -> Decimal:
    """Coerce user input into a two-place ``Decimal``.

    Accepts ``Decimal``, ``int`` and strings such as ``"1,234.50"`` or
    ``"$12"``. Raises ``ValidationError`` for floats, non-numbers, non-finite
    values and amounts with sub-cent precision.
    """
    if isinstance(value, (bool, float)):
        raise ValidationError("Amount must be an exact decimal, not a float")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, str):
        clean = value.strip().replace("$", "").replace(" ", "").replace(",", "")
        if not clean:
            raise ValidationError("Amount is required")
        try:
            amount = Decimal(clean)
        except InvalidOperation as exc:
            raise ValidationError("Invalid amount") from exc
    else:
        raise ValidationError("Invalid amount")

    if not amount.is_finite():
        raise ValidationError("Invalid amount")
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError("Amount is too large")
    quantized = amount.quantize(CENT)
    if quantized != amount:
        raise ValidationError("Amount cannot have more than two decimal places")
    return quantized


def amount_to_cents(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value())


def cents_to_amount(cents: int) -> Decimal:
    return Decimal(cents).scaleb(-2)

