from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from floor_token import FloorToken, FloorTokenConfig
from floor_token.core import (
    ID_ONE,
    PRECISION,
    SCALE_OFFSET,
    BinReserves,
    MintResult,
    mul_shift_round_up,
    price_from_id,
)
from floor_token.gateway import CounterAsset, PairGateway, TokenLedger
from floor_token.hooks import TokenHooks

TOKEN = "floor-token"
PAIR = "pair"
TOKEN_Y = "token-y"
OWNER = "owner"
TAX = "tax-recipient"
ALICE = "alice"
BOB = "bob"

BIN_STEP = 25
BASE_ID = ID_ONE + 100
FLOOR_PER_BIN = 100 * 10 ** 18


# -----------------------------
# Test doubles
# -----------------------------


class FakeLedger(TokenLedger):
    """In-memory floor token balances; notifies `hooks` before every mutation."""

    def __init__(self) -> None:
        self.balances: Dict[str, int] = {}
        self.supply = 0
        self.hooks: Optional[TokenHooks] = None

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def total_supply(self) -> int:
        return self.supply

    def credit(self, account: str, amount: int) -> None:
        """Raw mint, no hooks (test setup only)."""
        self.balances[account] = self.balance_of(account) + amount
        self.supply += amount

    def mint(self, account: str, amount: int) -> None:
        if self.hooks is not None:
            self.hooks.mint_hook(account, amount)
        self.credit(account, amount)

    def burn(self, account: str, amount: int) -> None:
        if self.hooks is not None:
            self.hooks.burn_hook(account, amount)
        assert self.balance_of(account) >= amount, "burn exceeds balance"
        self.balances[account] -= amount
        self.supply -= amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        assert sender != recipient
        if self.hooks is not None:
            self.hooks.before_transfer(sender, recipient, amount)
        assert self.balance_of(sender) >= amount, "transfer exceeds balance"
        self.balances[sender] -= amount
        self.balances[recipient] = self.balance_of(recipient) + amount

    def snapshot(self):
        return dict(self.balances), self.supply

    def restore(self, saved) -> None:
        balances, self.supply = saved
        self.balances = dict(balances)


class FakeCounterAsset(CounterAsset):
    def __init__(self) -> None:
        self.address = TOKEN_Y
        self.balances: Dict[str, int] = {}

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def credit(self, account: str, amount: int) -> None:
        self.balances[account] = self.balance_of(account) + amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        assert self.balance_of(sender) >= amount
        self.balances[sender] -= amount
        self.credit(recipient, amount)

    def snapshot(self):
        return dict(self.balances)

    def restore(self, saved) -> None:
        self.balances = dict(saved)


class FakePair(PairGateway):
    """Minimal bin pair: per-bin reserves and shares, mint from unaccounted balances.

    Share accounting is deliberately naive (first deposit mints shares 1:1 with
    the deposited amount, later deposits pro rata to the bin value); the tests
    only keep one asset per bin.

    `on_burn` / `on_mint` run before the pair's own logic and let tests inject
    reentrant calls or concurrent deposits. `snapshot` / `restore` copy the
    bins, shares, fees and active id (not the callbacks or the call log).
    """

    def __init__(self, ledger: FakeLedger, counter: FakeCounterAsset, *, active_id: int, operator: str = TOKEN) -> None:
        self.address = PAIR
        self.ledger = ledger
        self.counter = counter
        self.operator = operator
        self._active_id = active_id
        self.bins: Dict[int, List[int]] = {}
        self.supplies: Dict[int, int] = {}
        self.shares: Dict[Tuple[str, int], int] = {}
        self.fees = [0, 0]
        self.on_burn: Optional[Callable[[], None]] = None
        self.on_mint: Optional[Callable[[], None]] = None
        self.mint_x_override: Optional[int] = None
        self.mint_y_override: Optional[int] = None
        self.calls: List[str] = []

    # --- views ---

    def active_id(self) -> int:
        return self._active_id

    def set_active_id(self, bin_id: int) -> None:
        self._active_id = bin_id

    def balance_of(self, owner: str, bin_id: int) -> int:
        return self.shares.get((owner, bin_id), 0)

    def get_bin(self, bin_id: int) -> BinReserves:
        rx, ry = self.bins.get(bin_id, [0, 0])
        return BinReserves(rx, ry)

    def total_supply(self, bin_id: int) -> int:
        return self.supplies.get(bin_id, 0)

    def net_reserves(self) -> Tuple[int, int]:
        return (
            sum(b[0] for b in self.bins.values()),
            sum(b[1] for b in self.bins.values()),
        )

    def reserves(self) -> Tuple[int, int]:
        rx, ry = self.net_reserves()
        return rx + self.fees[0], ry + self.fees[1]

    def protocol_fees(self) -> Tuple[int, int]:
        return self.fees[0], self.fees[1]

    def unaccounted(self) -> Tuple[int, int]:
        rx, ry = self.reserves()
        return self.ledger.balance_of(PAIR) - rx, self.counter.balance_of(PAIR) - ry

    # --- writes ---

    def burn(self, ids: Sequence[int], shares: Sequence[int], recipient: str) -> None:
        self.calls.append("burn")
        if self.on_burn is not None:
            self.on_burn()
        out_x = out_y = 0
        for bin_id, share in zip(ids, shares):
            if share == 0:
                continue
            owned = self.balance_of(self.operator, bin_id)
            assert owned >= share, "burning more shares than owned"
            supply = self.supplies[bin_id]
            rx, ry = self.bins[bin_id]
            ax = share * rx // supply
            ay = share * ry // supply
            self.bins[bin_id] = [rx - ax, ry - ay]
            self.supplies[bin_id] = supply - share
            self.shares[(self.operator, bin_id)] = owned - share
            out_x += ax
            out_y += ay
        if recipient != PAIR:
            if out_x:
                self.ledger.transfer(PAIR, recipient, out_x)
            if out_y:
                self.counter.transfer(PAIR, recipient, out_y)

    def mint(self, ids, distribution_x, distribution_y, recipient) -> MintResult:
        self.calls.append("mint")
        if self.on_mint is not None:
            self.on_mint()
        avail_x, avail_y = self.unaccounted()
        added_x = added_y = 0
        for bin_id, dx, dy in zip(ids, distribution_x, distribution_y):
            ax = avail_x * dx // PRECISION
            ay = avail_y * dy // PRECISION
            if ax == 0 and ay == 0:
                continue
            rx, ry = self.bins.get(bin_id, [0, 0])
            supply = self.supplies.get(bin_id, 0)
            minted = ax + ay if supply == 0 or rx + ry == 0 else (ax + ay) * supply // (rx + ry)
            self.bins[bin_id] = [rx + ax, ry + ay]
            self.supplies[bin_id] = supply + minted
            self.shares[(recipient, bin_id)] = self.balance_of(recipient, bin_id) + minted
            added_x += ax
            added_y += ay
        if self.mint_x_override is not None:
            added_x = self.mint_x_override
        if self.mint_y_override is not None:
            added_y = self.mint_y_override
        return MintResult(added_x, added_y)

    def snapshot(self):
        return (
            {b: list(r) for b, r in self.bins.items()},
            dict(self.supplies),
            dict(self.shares),
            list(self.fees),
            self._active_id,
        )

    def restore(self, saved) -> None:
        bins, supplies, shares, fees, active_id = saved
        self.bins = {b: list(r) for b, r in bins.items()}
        self.supplies = dict(supplies)
        self.shares = dict(shares)
        self.fees = list(fees)
        self._active_id = active_id

    # --- market simulation ---

    def buy_bin(self, bin_id: int, buyer: str, bin_step: int = BIN_STEP) -> int:
        """Buyer pays counter asset for the whole X reserve of `bin_id`; active moves above it."""
        rx, ry = self.bins[bin_id]
        price = price_from_id(bin_id, bin_step)
        paid = mul_shift_round_up(rx, price, SCALE_OFFSET)
        self.counter.credit(PAIR, paid)
        self.bins[bin_id] = [0, ry + paid]
        self.ledger.transfer(PAIR, buyer, rx)
        self._active_id = bin_id + 1
        return paid


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture()
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture()
def counter() -> FakeCounterAsset:
    return FakeCounterAsset()


@pytest.fixture()
def pair(ledger, counter) -> FakePair:
    return FakePair(ledger, counter, active_id=BASE_ID)


@pytest.fixture()
def config() -> FloorTokenConfig:
    return FloorTokenConfig(
        token_y=TOKEN_Y,
        initial_active_id=BASE_ID,
        bin_step=BIN_STEP,
        floor_per_bin=FLOOR_PER_BIN,
        owner=OWNER,
        tax_recipient=TAX,
    )


@pytest.fixture()
def token(config, ledger, pair, counter) -> FloorToken:
    ft = FloorToken(config, address=TOKEN, ledger=ledger, pair=pair, counter_asset=counter)
    ledger.hooks = ft
    return ft


@pytest.fixture()
def sold_token(token, pair, ledger) -> FloorToken:
    """Roof raised by 10 bins, bins BASE_ID..BASE_ID+5 bought by alice (active = BASE_ID+6)."""
    token.raise_roof(OWNER, 10)
    for bin_id in range(BASE_ID, BASE_ID + 6):
        pair.buy_bin(bin_id, ALICE)
    return token

