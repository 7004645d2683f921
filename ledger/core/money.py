from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from ledger.core.exceptions import InvalidAmount
from ledger.db_types import MONEY_PRECISION, MONEY_SCALE

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest integer-digit count a Money() column holds
MAX_INTEGER_DIGITS = MONEY_PRECISION - MONEY_SCALE


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Parse a caller-supplied amount into a positive, cent-precision Decimal.

    Floats go through str() so 0.1 stays 0.10 instead of its binary expansion.
    Raises InvalidAmount for malformed, non-finite, non-positive values and
    for values too large for a money column.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmount(f"Invalid {field}: {value!r}", {field: value})

    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Invalid {field}: {value!r}", {field: str(value)})

    if not amount.is_finite():
        raise InvalidAmount(f"Invalid {field}: {value!r}", {field: str(value)})

    try:
        amount = quantize(amount)
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Invalid {field}: {value!r}", {field: str(value)})

    if amount.adjusted() >= MAX_INTEGER_DIGITS:
        raise InvalidAmount(
            f"{field.capitalize()} exceeds {MAX_INTEGER_DIGITS} integer digits",
            {field: str(value), "max_integer_digits": MAX_INTEGER_DIGITS},
        )

    if amount <= ZERO:
        raise InvalidAmount(f"{field.capitalize()} must be greater than zero", {field: str(amount)})
    return amount
