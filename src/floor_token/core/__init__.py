"""
Floor Token Core
================

Unified exports for integer-domain primitives: constants, checked u256
arithmetic, 128.128 bin prices, datatypes and exceptions.
Decimal helpers are provided *only* for I/O formatting.
"""

# NOTE:
#   The `core` package has no state and no knowledge of the pair or the ledger.
#   Everything stateful lives one level up (state, rebalance, roof, floor_token).

# Integer-domain constants
from .constants import (
    U256_MAX,
    U32_MAX,
    U16_MAX,
    SCALE_OFFSET,
    SCALE,
    PRECISION,
    BASIS_POINT_MAX,
    ID_ONE,
    ZERO_ADDRESS,
    STATUS_NOT_ENTERED,
    STATUS_ENTERED,
)

# Fixed-point math
from .fixed_point import (
    check_u256,
    check_u32,
    add,
    sub,
    saturating_sub,
    mul,
    mul_div_round_down,
    mul_div_round_up,
    mul_shift_round_down,
    mul_shift_round_up,
    shift_div_round_down,
    pow128,
    price_from_id,
)

# Decimal formatting helpers (non-core arithmetic)
from .fmt import (
    fmt_dec,
    price_to_decimal,
    amount_to_decimal,
)

# Datatypes
from .datatypes import (
    BinReserves,
    MintResult,
    BinPosition,
    BinSnapshot,
)

# Core exceptions
from .exc import (
    FloorTokenError,
    AmountDomainError,
    MathOverflow,
    PreconditionViolation,
    ZeroBins,
    Unauthorized,
    RebalancePaused,
    ActiveAboveRoof,
    RoofOutOfRange,
    ReentrantCall,
    InvariantViolation,
    ConfigError,
)

__all__ = [
    # constants
    "U256_MAX",
    "U32_MAX",
    "U16_MAX",
    "SCALE_OFFSET",
    "SCALE",
    "PRECISION",
    "BASIS_POINT_MAX",
    "ID_ONE",
    "ZERO_ADDRESS",
    "STATUS_NOT_ENTERED",
    "STATUS_ENTERED",
    # fixed point
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
    "price_from_id",
    # fmt
    "fmt_dec",
    "price_to_decimal",
    "amount_to_decimal",
    # datatypes
    "BinReserves",
    "MintResult",
    "BinPosition",
    "BinSnapshot",
    # exceptions
    "FloorTokenError",
    "AmountDomainError",
    "MathOverflow",
    "PreconditionViolation",
    "ZeroBins",
    "Unauthorized",
    "RebalancePaused",
    "ActiveAboveRoof",
    "RoofOutOfRange",
    "ReentrantCall",
    "InvariantViolation",
    "ConfigError",
]
