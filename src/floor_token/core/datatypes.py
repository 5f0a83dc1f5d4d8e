"""
Core datatypes exchanged with the pair and produced by range snapshots.

These datatypes are intentionally minimal and immutable so that the rebalance
and roof logic can remain deterministic and testable.

Notes:
- All amounts are plain ints in the u256 domain (see `fixed_point`).
- X is always the floor token, Y the counter asset.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple


# ---------------------------------------------------------------------------
# Pair results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BinReserves:
    """Reserves of a single bin, as reported by the pair."""

    reserve_x: int
    reserve_y: int


@dataclass(frozen=True)
class MintResult:
    """Amounts actually deposited by a pair mint (leftovers stay at the pair)."""

    amount_x_added: int
    amount_y_added: int


# ---------------------------------------------------------------------------
# Range snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BinPosition:
    """This contract's position in one bin.

    Fields:
    - bin_id: the bin.
    - share: liquidity shares owned by this contract.
    - total_shares: total share supply of the bin.
    - reserve_x / reserve_y: owned slice of the bin reserves, rounded down.
    """

    bin_id: int
    share: int
    total_shares: int
    reserve_x: int
    reserve_y: int


@dataclass(frozen=True)
class BinSnapshot:
    """Owned liquidity over [floor_id, upper_id], recomputed on every call.

    `shares_left_side` and `reserves_y` are indexed by `bin_id - floor_id` and
    cover the bins from the floor up to the active bin (zero where nothing is
    owned). They feed the new-floor search and the rebalance burn list.
    """

    floor_id: int
    total_floor_in_pair: int
    total_token_y_in_pair: int
    shares_left_side: List[int] = field(default_factory=list)
    reserves_y: List[int] = field(default_factory=list)
    positions: Tuple[BinPosition, ...] = ()

    def tokens_in_pair(self) -> Tuple[int, int]:
        return self.total_floor_in_pair, self.total_token_y_in_pair


__all__ = [
    "BinReserves",
    "MintResult",
    "BinPosition",
    "BinSnapshot",
]
