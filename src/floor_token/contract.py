"""
FloorToken host: the public surface of the floor mechanism.

The host owns the range state and wires the engine, the roof manager and the
transfer hook to a token ledger and a pair. Every entry point runs inside an
atomic scope: if the call raises, the range state and the event log are put
back exactly as they were, the way an aborted contract call leaves storage
untouched. Ledger, pair and counter asset are checkpointed through their
`snapshot`/`restore` methods and rolled back with it; a collaborator whose
`snapshot` returns None is left as the call left it.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, List, Tuple

from .config import FloorTokenConfig
from .core import Unauthorized, RebalancePaused, ActiveAboveRoof, PreconditionViolation, ConfigError
from .core import price_from_id, price_to_decimal
from .gateway import CounterAsset, PairGateway, TokenLedger
from .hooks import TokenHooks, TransferHook
from .rebalance import RebalanceEngine
from .roof import RoofManager
from .state import RangeState, ReentrancyGuard, Status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    name: str
    args: Tuple = ()


class FloorToken(TokenHooks):
    """Floor/roof mechanism for a token whose liquidity lives in a bin pair.

    `address` is the token contract's own address: the account that owns the
    locked liquidity in the pair. The token itself is the `TokenHooks` object to
    hand to the ledger, so that transfers trigger rebalances atomically.
    """

    def __init__(
        self,
        config: FloorTokenConfig,
        *,
        address: str,
        ledger: TokenLedger,
        pair: PairGateway,
        counter_asset: CounterAsset,
    ) -> None:
        self.config = config
        self.address = address
        self.ledger = ledger
        self.pair = pair
        self.counter_asset = counter_asset
        if getattr(counter_asset, "address", config.token_y) != config.token_y:
            raise ConfigError(
                f"counter asset {counter_asset.address!r} does not match token_y {config.token_y!r}"
            )
        self._owner = config.owner
        self.events: List[Event] = []

        self._state = RangeState.initial(
            config.initial_active_id, config.bin_step, config.floor_per_bin
        )
        self._guard = ReentrancyGuard(self._state)
        self.engine = RebalanceEngine(
            self._state,
            self._guard,
            pair,
            ledger,
            counter_asset,
            address=address,
            excluded_accounts=config.excluded_accounts(),
            emit=self._emit,
        )
        self.roof = RoofManager(
            self._state, self._guard, pair, ledger, address=address, emit=self._emit
        )
        self._transfer_hook = TransferHook(self._state, self._guard, pair, self.engine)

    # ------------- internals -------------

    def _emit(self, name: str, *args) -> None:
        self.events.append(Event(name, tuple(args)))

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        saved = self._state.snapshot()
        n_events = len(self.events)
        collaborators = (self.ledger, self.pair, self.counter_asset)
        checkpoints = [c.snapshot() for c in collaborators]
        try:
            yield
        except Exception:
            self._state.restore(saved)
            del self.events[n_events:]
            for collaborator, checkpoint in zip(collaborators, checkpoints):
                if checkpoint is not None:
                    collaborator.restore(checkpoint)
            raise

    def _only_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise Unauthorized(caller)

    # ------------- ownership -------------

    @property
    def owner(self) -> str:
        return self._owner

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self._only_owner(caller)
        if not new_owner:
            raise PreconditionViolation("FloorToken: new owner is empty")
        logger.info("ownership transferred %s -> %s", self._owner, new_owner)
        self._owner = new_owner
        self._emit("OWNERSHIP_TRANSFERRED", caller, new_owner)

    # ------------- read-only queries -------------

    def floor_id(self) -> int:
        return self._state.floor_id

    def roof_id(self) -> int:
        return self._state.roof_id

    def range(self) -> Tuple[int, int]:
        return self._state.floor_id, self._state.roof_id

    def bin_step(self) -> int:
        return self._state.bin_step

    def floor_per_bin(self) -> int:
        return self._state.floor_per_bin

    def rebalance_paused(self) -> bool:
        return self._state.rebalance_paused

    def status(self) -> Status:
        return self._state.status

    def floor_price(self) -> int:
        """Price of the floor bin, 128.128 fixed point."""
        return price_from_id(self._state.floor_id, self._state.bin_step)

    def floor_price_decimal(self) -> Decimal:
        return price_to_decimal(self.floor_price())

    def tokens_in_pair(self) -> Tuple[int, int]:
        """(floor tokens, counter asset) locked as liquidity by this contract."""
        return self.engine.tokens_in_pair()

    def calculate_new_floor_id(self) -> int:
        """Floor id a rebalance would move to now; equal to floor_id() when none is needed."""
        return self.engine.preview_new_floor_id()

    # ------------- entry points -------------

    def rebalance_floor(self) -> bool:
        """Force a rebalance; anyone may call it unless rebalancing is paused."""
        with self._atomic():
            if self._state.rebalance_paused:
                raise RebalancePaused()
            return self.engine.rebalance_floor()

    def raise_roof(self, caller: str, nb_bins: int) -> int:
        self._only_owner(caller)
        with self._atomic():
            return self.roof.raise_roof(self._state.roof_id, self._state.floor_id, nb_bins)

    def reduce_roof(self, caller: str, nb_bins: int) -> int:
        self._only_owner(caller)
        with self._atomic():
            return self.roof.reduce_roof(self._state.roof_id, self._state.floor_id, nb_bins)

    def pause_rebalance(self, caller: str) -> None:
        self._only_owner(caller)
        if self._state.rebalance_paused:
            raise PreconditionViolation("FloorToken: rebalance already paused")
        self._state.set_rebalance_paused(True)
        logger.info("rebalance paused")
        self._emit("REBALANCE_PAUSED")

    def unpause_rebalance(self, caller: str) -> None:
        self._only_owner(caller)
        if not self._state.rebalance_paused:
            raise PreconditionViolation("FloorToken: rebalance already unpaused")
        active_id = self.pair.active_id()
        roof_id = self._state.roof_id
        if roof_id != 0 and active_id > roof_id:
            raise ActiveAboveRoof(active_id, roof_id)
        self._state.set_rebalance_paused(False)
        logger.info("rebalance unpaused")
        self._emit("REBALANCE_UNPAUSED")

    def before_transfer(self, sender: str, recipient: str, amount: int) -> None:
        with self._atomic():
            self._transfer_hook.before_transfer(sender, recipient, amount)


__all__ = ["Event", "FloorToken"]
