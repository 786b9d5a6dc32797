from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .types import Rejection


@dataclass(frozen=True)
class CodeDef:
    code: str
    default_msg: str = ""


def mk_rejection(c: CodeDef, msg: str | None = None, data: dict[str, Any] | None = None) -> Rejection:
    """构造拒绝信号；msg 支持 {key} 占位符，由 data 填充。"""
    text = msg or c.default_msg
    if data is not None:
        # 占位符缺失时直接抛 KeyError
        text = text.format(**data)
    return Rejection(code=c.code, reason=text)


class RCodes:
    # --- 场景构建 ---
    NO_RANGE = CodeDef("R_NO_RANGE", "No range found for {pos} {role}")
    NO_COMBOS = CodeDef("R_NO_COMBOS", "No combos for hand class: {hand_class}")

    # --- 手牌门槛 ---
    GIVE_UP_INTENT = CodeDef(
        "R_GIVE_UP", "Give-up hand on a dangerous runout: no betting line to teach"
    )
    BARREL_INELIGIBLE = CodeDef("R_BARREL", "Hand not eligible for barrel: {reason}")

    # --- 结构/教学门槛 ---
    HARD_GATE = CodeDef(
        "R_HARD_GATE",
        "Hard rejection: river OOP with no betting allowed (structurally invalid node)",
    )
    SURVIVOR_GATE = CodeDef(
        "R_SURVIVOR",
        "Survivor gate: trivial river node (check dominant, no leverage, no nut advantage)",
    )
    INVALID_SIZE_SET = CodeDef(
        "R_SIZE_SET", "No bet-size set for leverage={leverage} mode={mode}"
    )

    # --- 重试 ---
    MAX_RETRIES = CodeDef("R_MAX_RETRIES", "Max retries exceeded")


__all__ = ["CodeDef", "RCodes", "mk_rejection"]
