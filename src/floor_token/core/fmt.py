"""
Formatting helpers (non-core arithmetic).

Core arithmetic uses integers only. Decimal here is only for formatting and
convenience (e.g., tests, logs, display).
"""

from decimal import Decimal, getcontext, ROUND_DOWN

from .constants import SCALE, PRICE_QUANTUM, TOKEN_QUANTUM
from .exc import AmountDomainError


# ---------------------------------------------------------------------------
# Global Decimal precision (formatting only)
# ---------------------------------------------------------------------------

#: Default global precision (number of significant digits) for Decimal-based
#: formatting. This does not affect core arithmetic which uses integers.
DEFAULT_DECIMAL_PRECISION: int = 50
getcontext().prec = DEFAULT_DECIMAL_PRECISION


def fmt_dec(x: Decimal, places: int = 18) -> str:
    """Format a Decimal in scientific notation with fixed fractional digits.

    The output is stable for logs and tests, e.g.:
      Decimal('1')        -> '1.000000000000000000E+0'
      Decimal('0.0025')   -> '2.500000000000000000E-3'
    """
    return format(x, f".{places}E")


def price_to_decimal(price: int) -> Decimal:
    """128.128 price -> Decimal, truncated to PRICE_QUANTUM."""
    if price < 0:
        raise AmountDomainError("price must be >= 0")
    return (Decimal(price) / Decimal(SCALE)).quantize(PRICE_QUANTUM, rounding=ROUND_DOWN)


def amount_to_decimal(amount: int, decimals: int = 18) -> Decimal:
    """Integer token amount -> Decimal units (display only)."""
    if amount < 0:
        raise AmountDomainError("amount must be >= 0")
    if decimals == 18:
        return Decimal(amount) * TOKEN_QUANTUM
    return Decimal(amount).scaleb(-decimals)


__all__ = [
    "DEFAULT_DECIMAL_PRECISION",
    "fmt_dec",
    "price_to_decimal",
    "amount_to_decimal",
]
