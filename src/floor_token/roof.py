"""
Roof management: pre-provisioned floor-token liquidity above the current price.

Raising the roof mints `floor_per_bin` tokens per new bin straight into the
pair and deposits them as X-only liquidity; reducing it burns the top bins and
destroys the tokens they release. Neither operation changes the circulating
supply, so neither moves the floor.

Floor tokens that already sit at the pair outside of its reserves and protocol
fees (a swap or deposit in flight) are left exactly as found: the roof
operations reconcile the pair's balance before and after their own mint/burn.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .core import (
    PRECISION,
    U32_MAX,
    ActiveAboveRoof,
    InvariantViolation,
    RoofOutOfRange,
    ZeroBins,
    add,
    amount_to_decimal,
    fmt_dec,
    mul,
    saturating_sub,
    sub,
)
from .gateway import PairGateway, TokenLedger, bin_range, net_reserves
from .state import RangeState, ReentrancyGuard

logger = logging.getLogger(__name__)


class RoofManager:

    def __init__(
        self,
        state: RangeState,
        guard: ReentrancyGuard,
        pair: PairGateway,
        ledger: TokenLedger,
        *,
        address: str,
        emit: Optional[Callable[..., None]] = None,
    ) -> None:
        self.state = state
        self.guard = guard
        self.pair = pair
        self.ledger = ledger
        self.address = address
        self._emit = emit or (lambda name, *args: None)

    # ------------- helpers -------------

    def _settle_pair_balance(self, current: int, target: int) -> None:
        """Mint or burn at the pair so its unaccounted balance moves from `current` to `target`."""
        if current > target:
            self.ledger.burn(self.pair.address, current - target)
        elif target > current:
            self.ledger.mint(self.pair.address, target - current)

    def _unaccounted_floor(self) -> int:
        """Floor tokens at the pair that are neither reserves nor protocol fees."""
        floor_reserve = net_reserves(self.pair)[0]
        floor_fees = self.pair.protocol_fees()[0]
        return sub(self.ledger.balance_of(self.pair.address), add(floor_reserve, floor_fees))

    # ------------- operations -------------

    def raise_roof(self, roof_id: int, floor_id: int, nb_bins: int) -> int:
        """Add `nb_bins` X-only bins above the roof (starting at the floor if unset).

        Returns the new roof id.
        """
        with self.guard.guarded():
            if nb_bins <= 0:
                raise ZeroBins()
            active_id = self.pair.active_id()
            if roof_id != 0 and active_id > roof_id:
                raise ActiveAboveRoof(active_id, roof_id)

            next_id = floor_id if roof_id == 0 else roof_id + 1
            new_roof_id = next_id + nb_bins - 1
            if new_roof_id > U32_MAX:
                raise RoofOutOfRange(f"FloorToken: new roof too high ({new_roof_id})")

            share_per_bin = PRECISION // nb_bins
            floor_amount = mul(self.state.floor_per_bin, nb_bins)

            ids = bin_range(next_id, nb_bins)
            distribution_x = [share_per_bin] * nb_bins
            distribution_y = [0] * nb_bins

            floor_reserve = net_reserves(self.pair)[0]
            floor_fees = self.pair.protocol_fees()[0]
            pair_balance = self.ledger.balance_of(self.pair.address)

            # Tokens sent to the pair and waiting to be swapped or deposited; zero on a fresh pair.
            previous_balance = saturating_sub(saturating_sub(pair_balance, floor_fees), floor_reserve)

            # Exactly `floor_amount` must be available for the deposit.
            self._settle_pair_balance(previous_balance, floor_amount)

            result = self.pair.mint(ids, distribution_x, distribution_y, self.address)

            if result.amount_y_added != 0:
                raise InvariantViolation(
                    f"FloorToken: invalid amounts (counter asset added: {result.amount_y_added})"
                )

            floor_in_excess = 0
            if result.amount_x_added != floor_amount:
                floor_in_excess = self._unaccounted_floor()

            # Restore the in-flight balance found before the deposit.
            self._settle_pair_balance(floor_in_excess, previous_balance)

            self.state.set_roof_id(new_roof_id)
            logger.info(
                "roof raised %d -> %d (%d bins, %s tokens deposited)",
                roof_id, new_roof_id, nb_bins, fmt_dec(amount_to_decimal(result.amount_x_added), 6),
            )
            self._emit("ROOF_RAISED", new_roof_id)
            return new_roof_id

    def reduce_roof(self, roof_id: int, floor_id: int, nb_bins: int) -> int:
        """Remove the top `nb_bins` bins and burn the floor tokens they release.

        Returns the new roof id.
        """
        with self.guard.guarded():
            if nb_bins <= 0:
                raise ZeroBins()
            if roof_id <= nb_bins:
                raise RoofOutOfRange(
                    f"FloorToken: roof too low (roof_id={roof_id}, nb_bins={nb_bins})"
                )

            new_roof_id = roof_id - nb_bins
            active_id = self.pair.active_id()
            if new_roof_id <= active_id:
                raise RoofOutOfRange(
                    f"FloorToken: new roof not above active bin ({new_roof_id} <= {active_id})"
                )
            if new_roof_id < floor_id:
                raise RoofOutOfRange(
                    f"FloorToken: new roof below floor bin ({new_roof_id} < {floor_id})"
                )

            ids: List[int] = [roof_id - i for i in range(nb_bins)]
            shares = [self.pair.balance_of(self.address, bin_id) for bin_id in ids]

            current_reserves = net_reserves(self.pair)
            current_fees = self.pair.protocol_fees()
            floor_balance = self.ledger.balance_of(self.pair.address)
            floor_excess = sub(floor_balance, add(current_reserves[0], current_fees[0]))

            self.pair.burn(ids, shares, self.pair.address)

            new_reserves = net_reserves(self.pair)
            new_fees = self.pair.protocol_fees()

            # Bins above the active bin hold no counter asset.
            if new_reserves[1] != current_reserves[1] or new_fees[1] != current_fees[1]:
                raise InvariantViolation("FloorToken: tokenY reserve changed")

            new_floor_balance = self.ledger.balance_of(self.pair.address)
            if new_floor_balance != floor_balance:
                raise InvariantViolation("FloorToken: floor balance changed")

            new_floor_excess = sub(new_floor_balance, add(new_reserves[0], new_fees[0]))

            # Only what this burn released is destroyed; earlier excess stays untouched.
            burned = 0
            if new_floor_excess > floor_excess:
                burned = new_floor_excess - floor_excess
                self.ledger.burn(self.pair.address, burned)

            self.state.set_roof_id(new_roof_id)
            logger.info(
                "roof reduced %d -> %d (%d bins, %s tokens burned)",
                roof_id, new_roof_id, nb_bins, fmt_dec(amount_to_decimal(burned), 6),
            )
            self._emit("ROOF_REDUCED", new_roof_id)
            return new_roof_id


__all__ = ["RoofManager"]
