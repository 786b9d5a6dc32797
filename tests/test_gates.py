import pytest
from spot_core.cards import card_value
from spot_core.engine.codes import RCodes, mk_rejection
from spot_core.engine.gates import (
    barrel_gate,
    check_barrel_eligibility,
    hard_gate,
    intent_gate,
    survivor_gate,
)
from spot_core.engine.hand_class import classify_hand
from spot_core.engine.hand_features import hand_features
from spot_core.engine.types import (
    ActionIntent,
    BettingContext,
    HandIntent,
    Leverage,
    OptionSet,
    Polarity,
    RangeAdvantage,
    StackPressure,
    Street,
    TurnType,
)


def _elig(hand, board, turn_type=TurnType.BLANK):
    hc = classify_hand(hand, board, turn_type)
    return check_barrel_eligibility(
        hc, hand_features(hand, board), turn_type, [card_value(c) for c in board]
    )


@pytest.mark.parametrize(
    "hand,board,turn_type,can_barrel,reason",
    [
        (["Kh", "Qd"], ["Ks", "7d", "2c"], TurnType.BLANK, True,
         "Strong made hand: value bet with smaller sizing"),
        (["Ah", "Qd"], ["Ks", "7d", "2c"], TurnType.BLANK, False,
         "Air with no draw: cannot barrel"),
        (["7h", "6h"], ["9s", "7d", "2c", "Ks"], TurnType.OVERCARD, False,
         "Underpair on overcard turn: check-only"),
        (["7h", "6h"], ["Ks", "7d", "2c"], TurnType.BLANK, True,
         "Medium/weak pair: small sizing for protection"),
        (["Ah", "Kh"], ["Qh", "7h", "2c"], TurnType.BLANK, True,
         "High equity draw (NFD/combo): can barrel any size"),
        (["8h", "7d"], ["9s", "5d", "2c"], TurnType.BLANK, False,
         "Weak gutshot with no pair: check-only"),
    ],
)
def test_barrel_eligibility(hand, board, turn_type, can_barrel, reason):
    e = _elig(hand, board, turn_type)
    assert e.can_barrel is can_barrel
    assert e.reason == reason
    assert e.can_check


def test_strong_made_hand_is_small_only():
    e = _elig(["Kh", "Qd"], ["Ks", "7d", "2c"])
    assert e.can_barrel_small and not e.can_barrel_large


def test_barrel_gate_rejection_carries_reason():
    hand, board = ["Ah", "Qd"], ["Ks", "7d", "2c"]
    hc = classify_hand(hand, board)
    rej = barrel_gate(hc, hand_features(hand, board), TurnType.BLANK, [card_value(c) for c in board])
    assert rej is not None and rej.rejected
    assert rej.code == "R_BARREL"
    assert rej.reason == "Hand not eligible for barrel: Air with no draw: cannot barrel"
    assert rej.to_dict() == {"rejected": True, "code": "R_BARREL", "reason": rej.reason}


def test_intent_gate_only_blocks_give_up():
    assert intent_gate(HandIntent.GIVE_UP).code == "R_GIVE_UP"
    for intent in HandIntent:
        if intent is not HandIntent.GIVE_UP:
            assert intent_gate(intent) is None


def _ctx(**kw):
    base = dict(
        street=Street.RIVER,
        hero_is_ip=False,
        leverage=Leverage.LOW,
        polarity=Polarity.MERGED,
        range_advantage=RangeAdvantage.VILLAIN,
        nut_advantage=False,
        stack_pressure=StackPressure.LOW,
        check_dominant=True,
        allows_small_bet=False,
        allows_large_bet=False,
        allows_overbet=False,
    )
    base.update(kw)
    return BettingContext(**base)


def test_hard_gate():
    assert hard_gate(_ctx()).code == "R_HARD_GATE"
    assert hard_gate(_ctx(hero_is_ip=True)) is None
    assert hard_gate(_ctx(street=Street.TURN)) is None
    assert hard_gate(_ctx(allows_small_bet=True)) is None


CHECK_FIRST = OptionSet(
    opts=(ActionIntent.CHECK, ActionIntent.SMALL, ActionIntent.LARGE), best_idx=0
)


def test_survivor_gate_rejects_trivial_river_check():
    ctx = _ctx(hero_is_ip=True, allows_small_bet=True)
    rej = survivor_gate(ctx, CHECK_FIRST)
    assert rej is not None and rej.code == "R_SURVIVOR"


@pytest.mark.parametrize(
    "changes,best_idx",
    [
        ({"nut_advantage": True}, 0),
        ({"leverage": Leverage.MEDIUM}, 0),
        ({"street": Street.TURN}, 0),
        ({"check_dominant": False}, 0),
        ({}, 1),
    ],
)
def test_survivor_gate_passes_when_any_condition_fails(changes, best_idx):
    ctx = _ctx(hero_is_ip=True, allows_small_bet=True, **changes)
    opt_set = OptionSet(opts=CHECK_FIRST.opts, best_idx=best_idx)
    assert survivor_gate(ctx, opt_set) is None


def test_rejection_message_fills_placeholders():
    rej = mk_rejection(RCodes.INVALID_SIZE_SET, data={"leverage": "high", "mode": "merged"})
    assert rej.code == "R_SIZE_SET"
    assert rej.reason == "No bet-size set for leverage=high mode=merged"
    assert mk_rejection(RCodes.MAX_RETRIES).reason == "Max retries exceeded"
    assert mk_rejection(RCodes.HARD_GATE, msg="custom {x}", data={"x": 1}).reason == "custom 1"


@pytest.mark.parametrize("data", [{"wrong": 1}, {}])
def test_rejection_with_missing_placeholder_raises(data):
    with pytest.raises(KeyError):
        mk_rejection(RCodes.BARREL_INELIGIBLE, data=data)
