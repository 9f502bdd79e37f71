"""
Integer currency helpers.

All amounts in LunchSplit are whole numbers in the smallest currency unit
(won), so arithmetic is done on ints and never on floats.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from app.config import settings
from app.exceptions import MealValidationError
from domain.enums import ValidationReason

_SEPARATORS = re.compile(r"[,\s_]")


def parse_amount(value: Any) -> int:
    """
    Parse user input into a positive integer amount.

    Accepts ints, integral floats, Decimals and numeric strings such as
    ``"30000"`` or ``"30,000"``.

    Raises:
        MealValidationError: invalidPrice for non-numeric, fractional,
            zero or negative values.
    """
    if isinstance(value, bool) or value is None:
        raise MealValidationError(ValidationReason.INVALID_PRICE, details={"price": value})

    if isinstance(value, int):
        amount = Decimal(value)
    else:
        text = _SEPARATORS.sub("", str(value))
        try:
            amount = Decimal(text)
        except InvalidOperation:
            raise MealValidationError(
                ValidationReason.INVALID_PRICE, details={"price": str(value)}
            ) from None

    if not amount.is_finite() or amount != amount.to_integral_value() or amount <= 0:
        raise MealValidationError(ValidationReason.INVALID_PRICE, details={"price": str(value)})
    return int(amount)


def split_evenly(price: int, count: int) -> int:
    """Round-half-up share of ``price`` for ``count`` consumers.

    The remainder is not redistributed, so ``split_evenly(10000, 3) * 3`` is
    9999.
    """
    if count <= 0:
        raise ValueError(f"Cannot split {price} among {count} consumers")
    return (2 * price + count) // (2 * count)


def sum_amounts(amounts: Iterable[int]) -> int:
    return sum(amounts, 0)


def format_amount(amount: int) -> str:
    """30000 -> '30,000'"""
    return f"{amount:,}"


def format_won(amount: int) -> str:
    """30000 -> '30,000원'"""
    return f"{format_amount(amount)}{settings.currency_suffix}"
