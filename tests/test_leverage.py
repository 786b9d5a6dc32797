import math

import pytest
from spot_core.engine.hand_class import classify_hand, classify_intent
from spot_core.engine.hand_features import hand_features, pair_quality
from spot_core.engine.leverage import (
    compute_spr,
    get_size_set,
    has_nut_flush,
    has_nut_straight,
    has_strong_blockers,
    infer_betting_mode,
    is_valid_leverage_mode,
    leverage_profile,
    should_be_all_in,
)
from spot_core.engine.types import (
    BettingMode,
    HandClass,
    HandIntent,
    Leverage,
    Rejection,
    TurnType,
)


def _lev(hand, board, turn_type=TurnType.BLANK):
    hc = classify_hand(hand, board, turn_type)
    feats = hand_features(hand, board)
    pq = pair_quality(hand, board)
    intent = classify_intent(hc, feats, pq, turn_type)
    return leverage_profile(
        hand_class=hc,
        intent=intent,
        turn_type=turn_type,
        features=feats,
        hand=hand,
        board=board,
        pq=pq,
    )


@pytest.mark.parametrize(
    "hand,board,turn_type,expected",
    [
        # 底对无条件压到 low
        (["2h", "3d"], ["Ks", "7d", "2c"], TurnType.BLANK, Leverage.LOW),
        (["7h", "6h"], ["Ks", "7d", "2c", "Qs"], TurnType.OVERCARD, Leverage.LOW),
        (["8h", "7h"], ["9s", "6d", "5c"], TurnType.BLANK, Leverage.HIGH),  # nut straight
        (["Ah", "4d"], ["2s", "3c", "5h"], TurnType.BLANK, Leverage.HIGH),  # wheel
        (["Ah", "3h"], ["Kh", "8h", "2h"], TurnType.BLANK, Leverage.HIGH),  # nut flush
        (["8h", "7h"], ["Qh", "Th", "9c"], TurnType.BLANK, Leverage.HIGH),  # combo on dynamic
        (["Kh", "Qd"], ["Ks", "7d", "2c"], TurnType.BLANK, Leverage.MEDIUM),
        (["9h", "8h"], ["Th", "7h", "2c"], TurnType.BLANK, Leverage.MEDIUM),  # combo, static
        (["7h", "6h"], ["Ks", "7d", "2c"], TurnType.BLANK, Leverage.LOW),  # thin value
    ],
)
def test_leverage_profile(hand, board, turn_type, expected):
    assert _lev(hand, board, turn_type) is expected


def test_wheel_is_not_the_nut_straight_but_still_high():
    hand, board = ["Ah", "4d"], ["2s", "3c", "5h"]
    assert not has_nut_straight(hand, board)
    assert _lev(hand, board) is Leverage.HIGH


def test_has_nut_flush_with_king_when_ace_on_board():
    assert has_nut_flush(["Kh", "3d"], ["Ah", "8h", "2h", "5h"])
    assert not has_nut_flush(["Qh", "3d"], ["Ah", "8h", "2h", "5h"])
    assert has_nut_flush(["Ah", "3h"], ["Kh", "8h", "2h"])


def test_size_sets_and_invalid_pair_rejected():
    assert get_size_set(Leverage.HIGH, BettingMode.OVERBET) == [100, 125]
    assert get_size_set(Leverage.MEDIUM, BettingMode.STANDARD) == [33, 50]
    rej = get_size_set(Leverage.LOW, BettingMode.OVERBET)
    assert isinstance(rej, Rejection)
    assert rej.code == "R_SIZE_SET"
    assert rej.reason == "No bet-size set for leverage=low mode=overbet"
    assert not is_valid_leverage_mode(Leverage.LOW, BettingMode.OVERBET)
    assert is_valid_leverage_mode(Leverage.HIGH, BettingMode.OVERBET)


def _mode(**kw):
    base = dict(
        leverage=Leverage.HIGH,
        hand_class=HandClass.MONSTER,
        intent=HandIntent.MADE_VALUE,
        turn_type=TurnType.BLANK,
        hand=["Ah", "3h"],
        board=["Kh", "8h", "2h"],
        effective_stack=90.0,
        pot=10.0,
        features=None,
    )
    base.update(kw)
    return infer_betting_mode(**base)


def test_infer_betting_mode():
    assert _mode() is BettingMode.OVERBET
    assert _mode(leverage=Leverage.MEDIUM) is BettingMode.STANDARD
    # SPR 2.0 < 2.5
    assert _mode(effective_stack=20.0) is BettingMode.STANDARD
    assert _mode(turn_type=TurnType.FLUSH_COMPLETER) is BettingMode.STANDARD
    assert _mode(hand_class=HandClass.STRONG_VALUE) is BettingMode.STANDARD


def test_made_straight_may_overbet_on_straight_completer():
    hand, board = ["8h", "7h"], ["9s", "6d", "5c", "Td"]
    feats = hand_features(hand, board)
    assert feats.has_straight
    got = _mode(
        hand=hand,
        board=board,
        turn_type=TurnType.STRAIGHT_COMPLETER,
        features=feats,
    )
    assert got is BettingMode.OVERBET


def test_blocker_bluff_counts_as_polarized():
    hand, board = ["Ad", "5c"], ["Js", "7d", "2c"]
    assert has_strong_blockers(hand, board)
    got = _mode(
        hand=hand,
        board=board,
        hand_class=HandClass.AIR,
        intent=HandIntent.PURE_BLUFF,
    )
    assert got is BettingMode.OVERBET


def test_compute_spr_and_all_in():
    assert compute_spr(90, 10) == 9
    assert math.isinf(compute_spr(10, 0))
    assert should_be_all_in(80, 100, 10)  # >= 80% of the stack
    assert not should_be_all_in(10, 100, 50)
    assert should_be_all_in(10, 12, 10)  # SPR 1.2
