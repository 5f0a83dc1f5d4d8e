"""
Fixed-point primitives: u256 checked arithmetic, full-width mul/div and bin prices.

- u256 domain: every amount is an int in [0, 2**256 - 1]; results outside raise MathOverflow.
- Full width: products are computed exactly before any division or shift, so no
  intermediate overflow is possible (Python ints are unbounded); only the final
  result is range-checked.
- Rounding semantics: *_round_down never exceeds the exact quotient, *_round_up is
  never below it.
- Prices: `price_from_id` returns (1 + bin_step / 10_000) ** (id - ID_ONE) in 128.128
  fixed point, computed with the same square-and-multiply routine as the pair, so
  prices agree bit for bit with the ones the pair uses.

# Alignment notes:
# - Division by zero (denominator or price) is a caller error and raises ZeroDivisionError.
# - Negative operands are rejected with AmountDomainError; there is no signed amount.
"""

from __future__ import annotations

from .constants import (
    U256_MAX,
    U32_MAX,
    SCALE,
    SCALE_OFFSET,
    BASIS_POINT_MAX,
    ID_ONE,
    MAX_POW_EXPONENT,
)
from .exc import AmountDomainError, MathOverflow

_U128_MAX = (1 << 128) - 1


# ----------------------------
# Range checks
# ----------------------------

def check_u256(x: int, what: str = "value") -> int:
    """Return `x` if it is a valid u256, raise otherwise."""
    if not isinstance(x, int) or isinstance(x, bool):
        raise AmountDomainError(f"{what} must be int, got {type(x).__name__}")
    if x < 0:
        raise AmountDomainError(f"{what} must be >= 0 (got {x})")
    if x > U256_MAX:
        raise MathOverflow(f"{what} exceeds u256 range")
    return x


def check_u32(x: int, what: str = "id") -> int:
    """Return `x` if it is a valid u32 bin id, raise otherwise."""
    if not isinstance(x, int) or isinstance(x, bool):
        raise AmountDomainError(f"{what} must be int, got {type(x).__name__}")
    if x < 0:
        raise AmountDomainError(f"{what} must be >= 0 (got {x})")
    if x > U32_MAX:
        raise MathOverflow(f"{what} exceeds u32 range")
    return x


# ----------------------------
# Checked u256 arithmetic
# ----------------------------

def add(a: int, b: int) -> int:
    return check_u256(check_u256(a) + check_u256(b), "sum")


def sub(a: int, b: int) -> int:
    check_u256(a)
    check_u256(b)
    if a < b:
        raise MathOverflow(f"u256 subtraction underflow ({a} - {b})")
    return a - b


def saturating_sub(a: int, b: int) -> int:
    """a - b, clamped at zero."""
    check_u256(a)
    check_u256(b)
    return a - b if a > b else 0


def mul(a: int, b: int) -> int:
    return check_u256(check_u256(a) * check_u256(b), "product")


def _ceil_div(a: int, b: int) -> int:
    if a < 0 or b <= 0:
        raise AmountDomainError("_ceil_div expects a>=0 and b>0")
    return 0 if a == 0 else -(-a // b)


# ----------------------------
# Full-width multiply then divide / shift
# ----------------------------

def mul_div_round_down(x: int, y: int, denominator: int) -> int:
    """floor(x * y / denominator)."""
    check_u256(x, "x")
    check_u256(y, "y")
    check_u256(denominator, "denominator")
    if denominator == 0:
        raise ZeroDivisionError("mul_div_round_down: zero denominator")
    return check_u256((x * y) // denominator, "mul_div result")


def mul_div_round_up(x: int, y: int, denominator: int) -> int:
    """ceil(x * y / denominator)."""
    check_u256(x, "x")
    check_u256(y, "y")
    check_u256(denominator, "denominator")
    if denominator == 0:
        raise ZeroDivisionError("mul_div_round_up: zero denominator")
    return check_u256(_ceil_div(x * y, denominator), "mul_div result")


def mul_shift_round_down(x: int, y: int, offset: int) -> int:
    """floor(x * y / 2**offset)."""
    check_u256(x, "x")
    check_u256(y, "y")
    if not 0 <= offset < 256:
        raise AmountDomainError(f"invalid shift offset {offset}")
    return check_u256((x * y) >> offset, "mul_shift result")


def mul_shift_round_up(x: int, y: int, offset: int) -> int:
    """ceil(x * y / 2**offset); used to price an amount of tokens at a 128.128 price."""
    result = mul_shift_round_down(x, y, offset)
    if (x * y) & ((1 << offset) - 1):
        result = check_u256(result + 1, "mul_shift result")
    return result


def shift_div_round_down(x: int, offset: int, denominator: int) -> int:
    """floor(x * 2**offset / denominator); converts a price-unit amount back to tokens."""
    check_u256(x, "x")
    check_u256(denominator, "denominator")
    if not 0 <= offset < 256:
        raise AmountDomainError(f"invalid shift offset {offset}")
    if denominator == 0:
        raise ZeroDivisionError("shift_div_round_down: zero denominator")
    return check_u256((x << offset) // denominator, "shift_div result")


# ----------------------------
# 128.128 power and bin prices
# ----------------------------

def pow128(x: int, y: int) -> int:
    """Return x ** y for a 128.128 base `x` and a signed integer exponent `y`.

    Bases above 1.0 are inverted first so every squaring stays below 2**256;
    the result is inverted back at the end when needed. Raises MathOverflow when
    |y| is too large or the result underflows to zero.
    """
    check_u256(x, "base")
    if y == 0:
        return SCALE

    invert = False
    abs_y = y
    if abs_y < 0:
        abs_y = -abs_y
        invert = not invert

    result = 0
    if abs_y < MAX_POW_EXPONENT:
        result = SCALE
        squared = x
        if x > _U128_MAX:
            squared = U256_MAX // squared
            invert = not invert

        bit = 1
        while bit < MAX_POW_EXPONENT:
            if abs_y & bit:
                result = (result * squared) >> SCALE_OFFSET
            squared = (squared * squared) >> SCALE_OFFSET
            bit <<= 1

    if result == 0:
        raise MathOverflow(f"pow128 underflow (x={x}, y={y})")
    return U256_MAX // result if invert else result


def get_base(bin_step: int) -> int:
    """1 + bin_step / 10_000 in 128.128."""
    return SCALE + (bin_step << SCALE_OFFSET) // BASIS_POINT_MAX


def get_exponent(bin_id: int) -> int:
    return bin_id - ID_ONE


def price_from_id(bin_id: int, bin_step: int) -> int:
    """Price of `bin_id` as a 128.128 fixed point number (strictly increasing in id)."""
    check_u32(bin_id, "bin_id")
    if bin_step <= 0:
        raise AmountDomainError(f"bin_step must be > 0 (got {bin_step})")
    return pow128(get_base(bin_step), get_exponent(bin_id))


__all__ = [
    "check_u256",
    "check_u32",
    "add",
    "sub",
    "saturating_sub",
    "mul",
    "mul_div_round_down",
    "mul_div_round_up",
    "mul_shift_round_down",
    "mul_shift_round_up",
    "shift_div_round_down",
    "pow128",
    "get_base",
    "get_exponent",
    "price_from_id",
]
