import itertools

import pytest
from spot_core.engine.betting_context import (
    RULES,
    BettingInput,
    PermissionState,
    _Facts,
    compute_betting_context,
    compute_stack_pressure,
    infer_nut_advantage,
    infer_range_advantage,
)
from spot_core.engine.types import (
    HandClass,
    Leverage,
    Polarity,
    RangeAdvantage,
    StackPressure,
    Street,
)


def _inp(**kw):
    base = dict(
        street=Street.TURN,
        hero_is_ip=True,
        leverage=Leverage.MEDIUM,
        effective_stack=90.0,
        pot=10.0,
        hero_is_opener=True,
        hand_class=HandClass.MEDIUM,
    )
    base.update(kw)
    return BettingInput(**base)


def _perms(ctx):
    return (ctx.check_dominant, ctx.allows_small_bet, ctx.allows_large_bet, ctx.allows_overbet)


def test_infer_range_and_nut_advantage():
    assert infer_range_advantage(True, False) is RangeAdvantage.HERO
    assert infer_range_advantage(False, False) is RangeAdvantage.VILLAIN
    assert infer_range_advantage(False, True) is RangeAdvantage.NEUTRAL
    assert infer_nut_advantage(HandClass.MONSTER, False, False)
    assert infer_nut_advantage("medium", True, False)
    assert infer_nut_advantage(HandClass.AIR, False, True)
    assert not infer_nut_advantage(HandClass.STRONG_VALUE, False, False)


@pytest.mark.parametrize(
    "stack,pot,expected",
    [
        (12.0, 10.0, StackPressure.HIGH),
        (25.0, 10.0, StackPressure.MEDIUM),
        (26.0, 10.0, StackPressure.LOW),
        (50.0, 0.0, StackPressure.LOW),
    ],
)
def test_compute_stack_pressure(stack, pot, expected):
    assert compute_stack_pressure(stack, pot) is expected


def test_flop_ip_opener_high_leverage_monster():
    ctx = compute_betting_context(
        _inp(
            street=Street.FLOP,
            leverage=Leverage.HIGH,
            effective_stack=97.5,
            pot=6.5,
            hand_class=HandClass.MONSTER,
        )
    )
    assert ctx.polarity is Polarity.MERGED
    assert ctx.range_advantage is RangeAdvantage.HERO
    assert ctx.nut_advantage
    assert ctx.stack_pressure is StackPressure.LOW
    assert _perms(ctx) == (False, True, True, True)
    assert ctx.reasons[0] == "Stack pressure: low (SPR = 15.00)"
    assert "Flop: polarity = merged, overbets disabled" in ctx.reasons


def test_turn_oop_defender_weak_is_small_lead_only():
    ctx = compute_betting_context(
        _inp(
            hero_is_ip=False,
            hero_is_opener=False,
            leverage=Leverage.LOW,
            hand_class=HandClass.WEAK,
            effective_stack=90.0,
            pot=20.0,
        )
    )
    assert ctx.range_advantage is RangeAdvantage.VILLAIN
    assert _perms(ctx) == (True, True, False, False)
    assert "Range disadvantage: large bets + overbets disabled, check dominant" in ctx.reasons


def test_river_oop_showdown_value_is_check_only():
    ctx = compute_betting_context(
        _inp(street=Street.RIVER, hero_is_ip=False, hand_class=HandClass.MEDIUM)
    )
    assert ctx.polarity is Polarity.MERGED
    assert _perms(ctx) == (True, False, False, False)


def test_river_ip_nut_advantage_unlocks_overbet():
    ctx = compute_betting_context(
        _inp(street=Street.RIVER, hero_is_opener=False, hand_class=HandClass.MONSTER)
    )
    assert ctx.range_advantage is RangeAdvantage.NEUTRAL
    assert ctx.polarity is Polarity.POLARIZED
    assert _perms(ctx) == (False, True, True, True)


def test_high_stack_pressure_unlocks_large():
    ctx = compute_betting_context(
        _inp(street=Street.FLOP, leverage=Leverage.LOW, effective_stack=10.0, pot=10.0)
    )
    assert ctx.stack_pressure is StackPressure.HIGH
    assert _perms(ctx) == (False, True, True, False)


def test_oop_overbet_clamp_is_final():
    ctx = compute_betting_context(
        _inp(
            hero_is_ip=False,
            leverage=Leverage.HIGH,
            hand_class=HandClass.MONSTER,
            effective_stack=10.0,
            pot=10.0,
        )
    )
    assert not ctx.allows_overbet
    assert ctx.reasons[-1] == "OOP overbet clamp: overbets disabled (final)"


def test_no_leverage_forces_check_dominant():
    ctx = compute_betting_context(_inp(street=Street.FLOP, leverage=Leverage.NONE))
    assert _perms(ctx) == (True, False, False, False)
    assert "No bets allowed: check dominant" in ctx.reasons


@pytest.mark.parametrize(
    "inp,expected",
    [
        # 河牌 OOP 低杠杆，范围中立，无坚果优势
        (
            _inp(street=Street.RIVER, hero_is_ip=False, leverage=Leverage.LOW,
                 hand_class=HandClass.AIR, range_advantage=RangeAdvantage.NEUTRAL,
                 nut_advantage=False, effective_stack=80.0, pot=20.0),
            (Polarity.MERGED, True, True, False, False),
        ),
        # 河牌 IP 高杠杆，范围与坚果优势都在 hero
        (
            _inp(street=Street.RIVER, leverage=Leverage.HIGH, hand_class=HandClass.MONSTER,
                 range_advantage=RangeAdvantage.HERO, nut_advantage=True,
                 effective_stack=50.0, pot=30.0),
            (Polarity.POLARIZED, False, True, True, True),
        ),
        # 翻牌 IP 无杠杆
        (
            _inp(street=Street.FLOP, leverage=Leverage.NONE, nut_advantage=False,
                 effective_stack=95.0, pot=10.0),
            (Polarity.MERGED, True, False, False, False),
        ),
    ],
)
def test_worked_examples(inp, expected):
    ctx = compute_betting_context(inp)
    assert (ctx.polarity, *_perms(ctx)) == expected
    assert ctx.nut_advantage is inp.nut_advantage


def test_zero_pot_reports_infinite_spr():
    ctx = compute_betting_context(_inp(pot=0.0))
    assert ctx.reasons[0] == "Stack pressure: low (SPR = ∞)"


def test_overrides_replace_inference():
    ctx = compute_betting_context(
        _inp(range_advantage=RangeAdvantage.VILLAIN, nut_advantage=True)
    )
    assert ctx.range_advantage is RangeAdvantage.VILLAIN
    assert ctx.nut_advantage
    assert ctx.check_dominant
    assert not ctx.allows_large_bet


def test_legacy_thin_value_class_counts_as_showdown_value():
    ctx = compute_betting_context(
        _inp(street=Street.RIVER, hero_is_ip=False, hand_class="thin_value")
    )
    assert _perms(ctx) == (True, False, False, False)


@pytest.mark.parametrize(
    "inp,expected",
    [
        # 顺子 IP 河牌：坚果优势 + 两极化
        (
            _inp(street=Street.RIVER, leverage=Leverage.HIGH, hand_class=HandClass.MONSTER,
                 has_straight=True, effective_stack=80.0, pot=20.0),
            (Polarity.POLARIZED, False, True, True, True),
        ),
        # 转牌 OOP 开池者中等牌力：不允许大注
        (
            _inp(hero_is_ip=False, leverage=Leverage.MEDIUM, hand_class=HandClass.MEDIUM,
                 effective_stack=80.0, pot=20.0),
            (Polarity.MERGED, False, True, False, False),
        ),
        # 翻牌 IP 防守方组合听牌
        (
            _inp(street=Street.FLOP, hero_is_opener=False, leverage=Leverage.HIGH,
                 hand_class=HandClass.AIR, combo_draw=True, effective_stack=97.5, pot=6.5),
            (Polarity.MERGED, False, True, True, True),
        ),
        # 河牌 IP 空气牌低杠杆
        (
            _inp(street=Street.RIVER, hero_is_opener=False, leverage=Leverage.LOW,
                 hand_class=HandClass.AIR, effective_stack=70.0, pot=30.0),
            (Polarity.MERGED, False, True, False, False),
        ),
        # 转牌 OOP 防守方强牌高杠杆
        (
            _inp(hero_is_ip=False, hero_is_opener=False, leverage=Leverage.HIGH,
                 hand_class=HandClass.STRONG_VALUE, effective_stack=80.0, pot=20.0),
            (Polarity.POLARIZED, True, True, False, False),
        ),
    ],
)
def test_reference_nodes(inp, expected):
    ctx = compute_betting_context(inp)
    assert (ctx.polarity, *_perms(ctx)) == expected


def _grid():
    streets = list(Street)
    classes = [*HandClass, "thin_value"]
    geometry = [(97.5, 6.5), (20.0, 10.0), (10.0, 10.0)]
    for street, ip, opener, lev, hc, (stack, pot), straight in itertools.product(
        streets, (True, False), (True, False), list(Leverage), classes, geometry, (True, False)
    ):
        yield _inp(
            street=street,
            hero_is_ip=ip,
            hero_is_opener=opener,
            leverage=lev,
            hand_class=hc,
            effective_stack=stack,
            pot=pot,
            has_straight=straight,
        )


def test_rules_after_range_lock_only_narrow():
    for inp in _grid():
        facts = _Facts(
            inp=inp,
            range_advantage=infer_range_advantage(inp.hero_is_opener, inp.hero_is_ip),
            nut_advantage=infer_nut_advantage(inp.hand_class, inp.has_straight, inp.has_flush),
            stack_pressure=compute_stack_pressure(inp.effective_stack, inp.pot),
        )
        state = PermissionState()
        for i, rule in enumerate(RULES):
            nxt = rule(state, facts)
            if i >= 5:
                assert not (nxt.allows_small_bet and not state.allows_small_bet)
                assert not (nxt.allows_large_bet and not state.allows_large_bet)
                assert not (nxt.allows_overbet and not state.allows_overbet)
                assert not (state.check_dominant and not nxt.check_dominant)
            state = nxt


def test_final_context_invariants():
    for inp in _grid():
        ctx = compute_betting_context(inp)
        if not ctx.hero_is_ip:
            assert not ctx.allows_overbet
        if not (ctx.allows_small_bet or ctx.allows_large_bet):
            assert ctx.check_dominant
        if ctx.range_advantage is RangeAdvantage.VILLAIN:
            assert ctx.check_dominant and not ctx.allows_large_bet
