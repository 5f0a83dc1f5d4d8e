from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from .core import BinReserves, MintResult, saturating_sub


class PairGateway:
    """Abstract view of the bin AMM pair (floor token = X, counter asset = Y).

    Every method may call back into the floor token before returning (for
    example through a ledger transfer hook), so callers re-read whatever they
    depend on after each call instead of caching it.

    Liquidity is minted and burned on behalf of the floor token contract: the
    pair implementation is bound to that contract's address, which is why
    `burn` and `mint` take no explicit owner.
    """

    address: str

    def active_id(self) -> int:
        raise NotImplementedError

    def balance_of(self, owner: str, bin_id: int) -> int:
        """Liquidity shares of `owner` in `bin_id`."""
        raise NotImplementedError

    def get_bin(self, bin_id: int) -> BinReserves:
        raise NotImplementedError

    def total_supply(self, bin_id: int) -> int:
        """Total liquidity shares of `bin_id`."""
        raise NotImplementedError

    def reserves(self) -> Tuple[int, int]:
        """Aggregate (x, y) reserves, protocol fees included."""
        raise NotImplementedError

    def protocol_fees(self) -> Tuple[int, int]:
        raise NotImplementedError

    def burn(self, ids: Sequence[int], shares: Sequence[int], recipient: str) -> None:
        raise NotImplementedError

    def mint(
        self,
        ids: Sequence[int],
        distribution_x: Sequence[int],
        distribution_y: Sequence[int],
        recipient: str,
    ) -> MintResult:
        """Deposit the pair's unaccounted balances into `ids`.

        Distributions are fractions of PRECISION; whatever is not deposited stays
        at the pair.
        """
        raise NotImplementedError

    def snapshot(self) -> Any:
        """Opaque checkpoint of the pair state, or None when rollback is unsupported."""
        return None

    def restore(self, saved: Any) -> None:
        """Put back the state captured by `snapshot`."""
        return None


class TokenLedger:
    """The floor token's own balance sheet (mint/burn restricted to the contract)."""

    def balance_of(self, account: str) -> int:
        raise NotImplementedError

    def total_supply(self) -> int:
        raise NotImplementedError

    def mint(self, account: str, amount: int) -> None:
        raise NotImplementedError

    def burn(self, account: str, amount: int) -> None:
        raise NotImplementedError

    def snapshot(self) -> Any:
        return None

    def restore(self, saved: Any) -> None:
        return None


class CounterAsset:
    """View of the counter asset (token Y) balances; `address` is the token Y address."""

    address: str

    def balance_of(self, account: str) -> int:
        raise NotImplementedError

    def snapshot(self) -> Any:
        return None

    def restore(self, saved: Any) -> None:
        return None


# ----------------------------
# Helpers
# ----------------------------

def net_reserves(pair: PairGateway) -> Tuple[int, int]:
    """Pair reserves minus protocol fees, clamped at zero."""
    reserve_x, reserve_y = pair.reserves()
    fees_x, fees_y = pair.protocol_fees()
    return saturating_sub(reserve_x, fees_x), saturating_sub(reserve_y, fees_y)


def bin_range(start: int, count: int) -> List[int]:
    return [start + i for i in range(count)]


__all__ = [
    "PairGateway",
    "TokenLedger",
    "CounterAsset",
    "net_reserves",
    "bin_range",
]
