import pytest

from floor_token import FloorToken, FloorTokenConfig
from floor_token.core import (
    U32_MAX,
    ActiveAboveRoof,
    InvariantViolation,
    RoofOutOfRange,
    Unauthorized,
    ZeroBins,
)
from floor_token.gateway import net_reserves

from conftest import (
    ALICE,
    BASE_ID,
    BIN_STEP,
    FLOOR_PER_BIN,
    OWNER,
    PAIR,
    TOKEN,
    TOKEN_Y,
    FakePair,
)


def _banner(title: str) -> None:
    print(f"\n=== {title} ===")


# -----------------------------
# raise_roof
# -----------------------------

def test_first_raise_starts_at_floor(token, pair, ledger):
    _banner("raise roof from unset")
    new_roof = token.raise_roof(OWNER, 5)
    print(f"roof -> +{new_roof - BASE_ID}, supply={ledger.total_supply()}")

    assert new_roof == token.roof_id() == BASE_ID + 4
    assert token.floor_id() == BASE_ID
    for bin_id in range(BASE_ID, BASE_ID + 5):
        assert pair.bins[bin_id] == [FLOOR_PER_BIN, 0]
        assert pair.balance_of(TOKEN, bin_id) > 0
    assert ledger.total_supply() == 5 * FLOOR_PER_BIN
    assert ledger.balance_of(PAIR) == 5 * FLOOR_PER_BIN
    assert pair.unaccounted() == (0, 0)
    assert token.events[-1].name == "ROOF_RAISED"
    assert token.events[-1].args == (BASE_ID + 4,)


def test_second_raise_continues_above_roof(token, pair):
    token.raise_roof(OWNER, 5)
    assert token.raise_roof(OWNER, 3) == BASE_ID + 7
    assert set(pair.bins) == set(range(BASE_ID, BASE_ID + 8))


def test_raise_burns_rounding_leftover(token, pair, ledger):
    # 1e18 // 3 leaves a few wei of the deposit undistributed
    token.raise_roof(OWNER, 3)
    deposited = sum(pair.bins[b][0] for b in range(BASE_ID, BASE_ID + 3))
    print(f"[leftover] deposited={deposited} target={3 * FLOOR_PER_BIN}")
    assert deposited < 3 * FLOOR_PER_BIN
    assert pair.unaccounted() == (0, 0)
    assert ledger.total_supply() == deposited


def test_raise_keeps_in_flight_tokens(token, pair, ledger):
    ledger.credit(PAIR, 7)
    token.raise_roof(OWNER, 5)
    assert pair.unaccounted() == (7, 0)
    assert net_reserves(pair) == (5 * FLOOR_PER_BIN, 0)
    assert ledger.total_supply() == 5 * FLOOR_PER_BIN + 7


def test_raise_ignores_protocol_fees(token, pair, ledger):
    pair.fees[0] = 11
    ledger.credit(PAIR, 11)
    token.raise_roof(OWNER, 4)
    assert pair.unaccounted() == (0, 0)
    assert ledger.balance_of(PAIR) == 4 * FLOOR_PER_BIN + 11


def test_raise_zero_bins_rejected(token):
    with pytest.raises(ZeroBins):
        token.raise_roof(OWNER, 0)
    assert token.roof_id() == 0


def test_raise_rejected_when_active_above_roof(token, pair, ledger):
    token.raise_roof(OWNER, 3)
    pair.set_active_id(BASE_ID + 5)
    supply = ledger.total_supply()
    with pytest.raises(ActiveAboveRoof) as e:
        token.raise_roof(OWNER, 2)
    print(f"[active-above-roof] {e.value}")
    assert e.value.active_id == BASE_ID + 5
    assert e.value.roof_id == BASE_ID + 2
    assert token.roof_id() == BASE_ID + 2
    assert ledger.total_supply() == supply


def test_raise_past_max_bin_id_rejected(ledger, counter):
    start = U32_MAX - 2
    config = FloorTokenConfig(
        token_y=TOKEN_Y,
        initial_active_id=start,
        bin_step=BIN_STEP,
        floor_per_bin=FLOOR_PER_BIN,
        owner=OWNER,
    )
    pair = FakePair(ledger, counter, active_id=start)
    ft = FloorToken(config, address=TOKEN, ledger=ledger, pair=pair, counter_asset=counter)
    ledger.hooks = ft

    assert ft.raise_roof(OWNER, 3) == U32_MAX
    with pytest.raises(RoofOutOfRange):
        ft.raise_roof(OWNER, 1)
    assert ft.roof_id() == U32_MAX


def test_roof_operations_are_owner_only(token, ledger):
    with pytest.raises(Unauthorized) as e:
        token.raise_roof(ALICE, 1)
    assert e.value.caller == ALICE
    token.raise_roof(OWNER, 5)
    with pytest.raises(Unauthorized):
        token.reduce_roof(ALICE, 1)
    assert token.roof_id() == BASE_ID + 4
    assert ledger.total_supply() == 5 * FLOOR_PER_BIN


# -----------------------------
# reduce_roof
# -----------------------------

def test_reduce_burns_released_tokens(token, pair, ledger):
    _banner("reduce roof")
    token.raise_roof(OWNER, 10)
    new_roof = token.reduce_roof(OWNER, 4)
    print(f"roof -> +{new_roof - BASE_ID}, supply={ledger.total_supply()}")

    assert new_roof == token.roof_id() == BASE_ID + 5
    for bin_id in range(BASE_ID + 6, BASE_ID + 10):
        assert pair.bins[bin_id] == [0, 0]
        assert pair.balance_of(TOKEN, bin_id) == 0
    assert ledger.total_supply() == 6 * FLOOR_PER_BIN
    assert pair.unaccounted() == (0, 0)
    assert token.events[-1].name == "ROOF_REDUCED"
    assert token.events[-1].args == (BASE_ID + 5,)


def test_raise_then_reduce_round_trip(token, ledger):
    token.raise_roof(OWNER, 5)
    token.raise_roof(OWNER, 3)
    token.reduce_roof(OWNER, 3)
    assert token.roof_id() == BASE_ID + 4
    assert ledger.total_supply() == 5 * FLOOR_PER_BIN
    assert [ev.name for ev in token.events] == ["ROOF_RAISED", "ROOF_RAISED", "ROOF_REDUCED"]


def test_reduce_keeps_pre_existing_excess(token, pair, ledger):
    token.raise_roof(OWNER, 10)
    ledger.credit(PAIR, 7)
    token.reduce_roof(OWNER, 2)
    assert pair.unaccounted() == (7, 0)
    assert ledger.total_supply() == 8 * FLOOR_PER_BIN + 7


def test_reduce_unset_roof_rejected(token):
    with pytest.raises(RoofOutOfRange):
        token.reduce_roof(OWNER, 1)


def test_reduce_zero_bins_rejected(token):
    token.raise_roof(OWNER, 4)
    with pytest.raises(ZeroBins):
        token.reduce_roof(OWNER, 0)


def test_reduce_more_bins_than_roof_id_rejected(token):
    token.raise_roof(OWNER, 4)
    with pytest.raises(RoofOutOfRange):
        token.reduce_roof(OWNER, token.roof_id())


@pytest.mark.parametrize("nb_bins", [9, 10])
def test_reduce_to_or_below_active_rejected(token, pair, ledger, nb_bins):
    token.raise_roof(OWNER, 10)
    supply = ledger.total_supply()
    with pytest.raises(RoofOutOfRange):
        token.reduce_roof(OWNER, nb_bins)
    assert token.roof_id() == BASE_ID + 9
    assert ledger.total_supply() == supply


def test_reduce_counter_asset_change_is_fatal(token, pair):
    token.raise_roof(OWNER, 10)
    n_events = len(token.events)

    def tamper():
        pair.bins[BASE_ID][1] += 1

    pair.on_burn = tamper
    with pytest.raises(InvariantViolation):
        token.reduce_roof(OWNER, 2)
    assert token.roof_id() == BASE_ID + 9
    assert len(token.events) == n_events


def test_reduce_above_sold_bins(sold_token, ledger):
    # bins BASE..BASE+5 sold, active BASE+6: only bins above the active bin can go
    held_by_alice = ledger.balance_of(ALICE)
    assert sold_token.reduce_roof(OWNER, 2) == BASE_ID + 7
    assert ledger.total_supply() == held_by_alice + 2 * FLOOR_PER_BIN
    with pytest.raises(RoofOutOfRange):
        sold_token.reduce_roof(OWNER, 1)


def test_failed_raise_rolls_back_ledger_and_pair(token, pair, ledger):
    _banner("failed raise leaves no trace")
    pair.mint_y_override = 1
    with pytest.raises(InvariantViolation):
        token.raise_roof(OWNER, 5)
    print(f"roof={token.roof_id()} supply={ledger.total_supply()} bins={len(pair.bins)}")
    assert token.roof_id() == 0
    assert ledger.total_supply() == 0
    assert ledger.balance_of(PAIR) == 0
    assert pair.bins == {}
    assert pair.shares == {}
    assert token.events == []

    pair.mint_y_override = None
    assert token.raise_roof(OWNER, 5) == BASE_ID + 4
    assert ledger.total_supply() == 5 * FLOOR_PER_BIN
