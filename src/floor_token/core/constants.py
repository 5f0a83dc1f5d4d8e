"""
Floor Token Core Constants (integer domain)
===========================================

Only integer constants of the liquidity-book bin model live here. Decimal
quanta used for display are kept next to them for the formatting layer.
"""

# NOTE: All token amounts are u256 and all bin ids are u32; the bounds below are
# enforced by `fixed_point` rather than by the Python int type.

from decimal import Decimal

# ---------------------------------------------------------------------------
# Integer widths
# ---------------------------------------------------------------------------

U256_MAX: int = (1 << 256) - 1
U32_MAX: int = (1 << 32) - 1
U16_MAX: int = (1 << 16) - 1


# ---------------------------------------------------------------------------
# Fixed-point layout
# ---------------------------------------------------------------------------

#: Prices are 128.128 fixed point numbers.
SCALE_OFFSET: int = 128
SCALE: int = 1 << SCALE_OFFSET

#: Distribution / ratio precision (1e18 == 100%).
PRECISION: int = 10 ** 18

#: Bin steps are expressed in basis points.
BASIS_POINT_MAX: int = 10_000

#: Bin id whose price is exactly 1.0.
ID_ONE: int = 1 << 23

#: Exponents at or above this bound underflow the 128.128 power routine.
MAX_POW_EXPONENT: int = 0x100000


# ---------------------------------------------------------------------------
# Addresses and guard statuses
# ---------------------------------------------------------------------------

#: Sentinel used as sender on mint and as recipient on burn.
ZERO_ADDRESS: str = "0"

STATUS_NOT_ENTERED: int = 1
STATUS_ENTERED: int = 2


# ---------------------------------------------------------------------------
# Decimal quanta for display/IO quantisation (formatting helpers)
# ---------------------------------------------------------------------------

#: Minimum quantisation step for 18-decimal token amounts.
TOKEN_QUANTUM: Decimal = Decimal("1e-18")

#: Minimum quantisation step for displayed prices.
PRICE_QUANTUM: Decimal = Decimal("1e-18")


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

__all__ = [
    "U256_MAX",
    "U32_MAX",
    "U16_MAX",
    "SCALE_OFFSET",
    "SCALE",
    "PRECISION",
    "BASIS_POINT_MAX",
    "ID_ONE",
    "MAX_POW_EXPONENT",
    "ZERO_ADDRESS",
    "STATUS_NOT_ENTERED",
    "STATUS_ENTERED",
    "TOKEN_QUANTUM",
    "PRICE_QUANTUM",
]
