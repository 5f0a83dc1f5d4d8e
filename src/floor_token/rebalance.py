"""
Floor rebalancing (integer domain).

The floor is the lowest bin where this contract still holds locked liquidity.
As the active bin rises, the counter asset held in the bins above the floor
may be enough to buy back the whole circulating supply at a higher price; the
engine then burns the bins between the old and the new floor and re-deposits
their counter asset into the new floor bin.

Flow of a rebalance (guard held throughout):
  1. read floor/active/roof, bail out when the floor cannot move;
  2. snapshot the owned liquidity over the range (one pass of pair reads);
  3. search the new floor id, downward from min(active, roof);
  4. persist the new floor id, then burn + re-mint via `safe_rebalance`.

`safe_rebalance` never credits the rebalance with counter asset that users sent
to the pair concurrently: the re-mint distribution is scaled by the ratio of
the burned reserve to the pair's unaccounted counter-asset balance.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .core import (
    PRECISION,
    SCALE_OFFSET,
    BinPosition,
    BinSnapshot,
    InvariantViolation,
    add,
    check_u32,
    mul_div_round_down,
    mul_div_round_up,
    mul_shift_round_up,
    price_from_id,
    saturating_sub,
    shift_div_round_down,
    sub,
)
from .gateway import CounterAsset, PairGateway, TokenLedger, net_reserves
from .state import RangeState, ReentrancyGuard

logger = logging.getLogger(__name__)

EventSink = Callable[..., None]


def _no_events(name: str, *args) -> None:
    return None


class RebalanceEngine:
    """Snapshot, new-floor search and the burn/re-mint sequence."""

    def __init__(
        self,
        state: RangeState,
        guard: ReentrancyGuard,
        pair: PairGateway,
        ledger: TokenLedger,
        counter_asset: CounterAsset,
        *,
        address: str,
        excluded_accounts: Iterable[str] = (),
        emit: Optional[EventSink] = None,
    ) -> None:
        self.state = state
        self.guard = guard
        self.pair = pair
        self.ledger = ledger
        self.counter_asset = counter_asset
        self.address = address
        self.excluded_accounts: Tuple[str, ...] = tuple(excluded_accounts)
        self._emit = emit or _no_events

    # ------------- reads -------------

    def snapshot_range(self, floor_id: int, active_id: int, roof_id: int) -> BinSnapshot:
        """Owned liquidity from `floor_id` up to `roof_id` (or `active_id` while the roof is unset).

        Owned amounts are `share * bin_reserve / total_shares`, rounded down.
        Per-bin shares and counter-asset reserves are also recorded for the bins
        at or below the active bin, indexed by `bin_id - floor_id`.
        """
        upper_id = roof_id if roof_id != 0 else active_id
        nb_left = 0 if floor_id > active_id else active_id - floor_id + 1

        shares_left_side = [0] * nb_left
        reserves_y = [0] * nb_left
        positions: List[BinPosition] = []
        total_floor = 0
        total_y = 0

        for bin_id in range(floor_id, upper_id + 1):
            share = self.pair.balance_of(self.address, bin_id)
            bin_reserves = self.pair.get_bin(bin_id)
            total_shares = self.pair.total_supply(bin_id)

            # total_shares >= share, so a zero supply is skipped here too
            if share == 0:
                continue

            reserve_x = (
                mul_div_round_down(share, bin_reserves.reserve_x, total_shares)
                if bin_reserves.reserve_x > 0 else 0
            )
            reserve_y = (
                mul_div_round_down(share, bin_reserves.reserve_y, total_shares)
                if bin_reserves.reserve_y > 0 else 0
            )

            total_floor = add(total_floor, reserve_x)
            total_y = add(total_y, reserve_y)
            positions.append(BinPosition(bin_id, share, total_shares, reserve_x, reserve_y))

            if bin_id <= active_id:
                shares_left_side[bin_id - floor_id] = share
                reserves_y[bin_id - floor_id] = reserve_y

        logger.debug(
            "snapshot [%d, %d] active=%d: %d owned bins, floor=%d, token_y=%d",
            floor_id, upper_id, active_id, len(positions), total_floor, total_y,
        )
        return BinSnapshot(
            floor_id=floor_id,
            total_floor_in_pair=total_floor,
            total_token_y_in_pair=total_y,
            shares_left_side=shares_left_side,
            reserves_y=reserves_y,
            positions=tuple(positions),
        )

    def tokens_in_pair(self) -> Tuple[int, int]:
        snap = self.snapshot_range(self.state.floor_id, self.pair.active_id(), self.state.roof_id)
        return snap.tokens_in_pair()

    def circulating_supply(self, snapshot: BinSnapshot) -> int:
        """Total supply minus owned liquidity minus the balances of excluded accounts."""
        circulating = sub(self.ledger.total_supply(), snapshot.total_floor_in_pair)
        for account in self.excluded_accounts:
            circulating = saturating_sub(circulating, self.ledger.balance_of(account))
        return circulating

    def calculate_new_floor_id(
        self,
        floor_id: int,
        active_id: int,
        roof_id: int,
        floor_in_circulation: int,
        token_y_available: int,
        token_y_reserves: Sequence[int],
    ) -> int:
        """Highest id whose price is still backed by the counter asset, below the active bin.

        Scans downward from min(active_id, roof_id) (active_id while the roof is
        unset). While the counter asset needed to buy the circulating supply at
        the candidate price exceeds what is available, the candidate bin's own
        reserve is removed from both sides and the scan continues. The result
        always satisfies floor_id <= result < active_id.
        """
        if floor_id >= active_id:
            return floor_id

        ceiling = active_id if roof_id == 0 else min(active_id, roof_id)
        bin_step = self.state.bin_step

        bin_id = ceiling + 1
        while bin_id > floor_id:
            bin_id -= 1

            price = price_from_id(bin_id, bin_step)
            index = bin_id - floor_id
            token_y_reserve = token_y_reserves[index] if index < len(token_y_reserves) else 0

            token_y_needed = mul_shift_round_up(floor_in_circulation, price, SCALE_OFFSET)

            if token_y_needed > token_y_available:
                token_y_available = sub(token_y_available, token_y_reserve)
                floor_in_circulation = sub(
                    floor_in_circulation,
                    shift_div_round_down(token_y_reserve, SCALE_OFFSET, price),
                )
            else:
                break

        # Never the active bin itself: depositing there pays the composition fee.
        return bin_id if active_id > bin_id else active_id - 1

    def preview_new_floor_id(self) -> int:
        """New floor id a rebalance would move to right now (no state change)."""
        floor_id = self.state.floor_id
        active_id = self.pair.active_id()
        roof_id = self.state.roof_id
        snap = self.snapshot_range(floor_id, active_id, roof_id)
        return self.calculate_new_floor_id(
            floor_id,
            active_id,
            roof_id,
            self.circulating_supply(snap),
            snap.total_token_y_in_pair,
            snap.reserves_y,
        )

    # ------------- writes -------------

    def rebalance_floor(self) -> bool:
        """Raise the floor as far as the counter asset allows; False when nothing moved."""
        # Read-only shortcut taken before the guard, so it answers False even while
        # another guarded call runs. The floor cannot pass active_id - 1.
        if self.state.floor_id + 1 >= self.pair.active_id():
            return False

        with self.guard.guarded():
            floor_id = self.state.floor_id
            active_id = self.pair.active_id()
            roof_id = self.state.roof_id
            if floor_id + 1 >= active_id:
                return False

            snap = self.snapshot_range(floor_id, active_id, roof_id)
            new_floor_id = self.calculate_new_floor_id(
                floor_id,
                active_id,
                roof_id,
                self.circulating_supply(snap),
                snap.total_token_y_in_pair,
                snap.reserves_y,
            )
            if new_floor_id <= floor_id:
                return False

            ids: List[int] = []
            shares: List[int] = []
            for i in range(new_floor_id - floor_id):
                if snap.reserves_y[i] > 0:
                    ids.append(floor_id + i)
                    shares.append(snap.shares_left_side[i])

            self.state.set_floor_id(new_floor_id)

            if ids:
                self._safe_rebalance(ids, shares, new_floor_id)

            logger.info(
                "floor raised %d -> %d (active=%d, bins moved=%d)",
                floor_id, new_floor_id, active_id, len(ids),
            )
            self._emit("FLOOR_REBALANCED", new_floor_id)
            return True

    def safe_rebalance(self, ids: Sequence[int], shares: Sequence[int], new_floor_id: int) -> None:
        """Burn `ids`/`shares` and re-deposit their counter asset at `new_floor_id` (guarded)."""
        with self.guard.guarded():
            self._safe_rebalance(ids, shares, new_floor_id)

    def _safe_rebalance(self, ids: Sequence[int], shares: Sequence[int], new_floor_id: int) -> None:
        check_u32(new_floor_id, "new_floor_id")
        pair = self.pair

        reserve_floor_before, reserve_y_before = net_reserves(pair)

        # Underlying tokens go back to the pair; all the counter asset is re-added below.
        pair.burn(list(ids), list(shares), pair.address)

        token_y_fees = pair.protocol_fees()[1]
        token_y_balance = sub(self.counter_asset.balance_of(pair.address), token_y_fees)

        reserve_floor_after, reserve_y_after = net_reserves(pair)

        # Bins below the active bin hold no floor token; anything else means we burned too high.
        if reserve_floor_after != reserve_floor_before:
            raise InvariantViolation(
                f"FloorToken: token reserve changed ({reserve_floor_before} -> {reserve_floor_after})"
            )

        delta_reserve_y = sub(reserve_y_before, reserve_y_after)
        delta_balance_y = sub(token_y_balance, reserve_y_after)

        # Counter asset already waiting at the pair (a swap in flight) stays there:
        # only the burned share of the unaccounted balance is re-deposited.
        if delta_balance_y > delta_reserve_y:
            distribution = mul_div_round_up(delta_reserve_y, PRECISION, delta_balance_y)
        else:
            distribution = PRECISION

        result = pair.mint([new_floor_id], [0], [distribution], self.address)

        expected_y = mul_div_round_down(delta_balance_y, distribution, PRECISION)
        if (
            result.amount_y_added != expected_y
            or result.amount_y_added < delta_reserve_y
            or result.amount_x_added != 0
        ):
            raise InvariantViolation(
                "FloorToken: broken invariant "
                f"(added_x={result.amount_x_added}, added_y={result.amount_y_added}, "
                f"expected_y={expected_y}, delta_reserve_y={delta_reserve_y})"
            )

        logger.debug(
            "safe rebalance: burned %d bins, re-minted %d token_y at bin %d (distribution=%d)",
            len(ids), result.amount_y_added, new_floor_id, distribution,
        )


__all__ = ["RebalanceEngine", "EventSink"]
