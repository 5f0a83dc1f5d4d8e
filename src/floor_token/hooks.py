from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .core import ZERO_ADDRESS, ActiveAboveRoof
from .gateway import PairGateway
from .state import RangeState, ReentrancyGuard

if TYPE_CHECKING:
    from .rebalance import RebalanceEngine

logger = logging.getLogger(__name__)


class TokenHooks:
    """Callbacks a token ledger invokes before it mutates balances.

    Mints and burns are reported through `mint_hook` / `burn_hook`; by default
    they are plain transfers from / to ZERO_ADDRESS.
    """

    def before_transfer(self, sender: str, recipient: str, amount: int) -> None:
        return None

    def mint_hook(self, account: str, amount: int) -> None:
        self.before_transfer(ZERO_ADDRESS, account, amount)

    def burn_hook(self, account: str, amount: int) -> None:
        self.before_transfer(account, ZERO_ADDRESS, amount)


class TransferHook(TokenHooks):
    """Rebalances the floor on ordinary transfers, when nothing else is running.

    - mints and burns (ZERO_ADDRESS on either side) never rebalance;
    - nothing happens while rebalancing is paused;
    - transfers out of the pair happen inside the pair's own calls, where the
      guard would reject a rebalance; only the roof bound is checked there;
    - otherwise a rebalance runs if the guard is free. Its result is ignored.
    """

    def __init__(
        self,
        state: RangeState,
        guard: ReentrancyGuard,
        pair: PairGateway,
        engine: "RebalanceEngine",
    ) -> None:
        self.state = state
        self.guard = guard
        self.pair = pair
        self.engine = engine

    def before_transfer(self, sender: str, recipient: str, amount: int) -> None:
        if sender == ZERO_ADDRESS or recipient == ZERO_ADDRESS:
            return
        if self.state.rebalance_paused:
            return

        if sender == self.pair.address:
            active_id = self.pair.active_id()
            roof_id = self.state.roof_id
            if roof_id != 0 and active_id > roof_id:
                raise ActiveAboveRoof(active_id, roof_id)
            return

        if not self.guard.is_entered():
            rebalanced = self.engine.rebalance_floor()
            logger.debug("transfer %s -> %s (%d): rebalanced=%s", sender, recipient, amount, rebalanced)


__all__ = ["TokenHooks", "TransferHook"]
