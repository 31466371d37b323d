"""Stage transition handler.

Maps a board move to the field updates the repository should apply. The
handler is pure: it takes the target stage and the current time and returns
a dict; the caller persists it.

Any stage may be moved to any other stage. Moving into contract_signed
stamps won_date and actual_close_date; moving into lost stamps lost_date.
Moving back out of a terminal stage leaves the earlier stamps untouched.

describe_move() classifies a move for logging and metrics only -- it never
blocks one.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from dealboard.pipeline.stages import (
    EXCEPTION_STAGES,
    LOST_STAGE,
    WON_STAGE,
    DealStage,
    stage_index,
)


class MoveDirection(str, Enum):
    """How a move relates to the registry order."""

    FORWARD = "forward"
    BACKWARD = "backward"
    SAME = "same"
    EXCEPTION = "exception"


def _stage_value(stage: DealStage | str) -> str:
    return stage.value if isinstance(stage, DealStage) else stage


def stage_change_fields(
    target: DealStage | str, now: datetime | None = None
) -> dict[str, Any]:
    """Extra fields to set when a deal enters ``target``, beyond ``stage``.

    Args:
        target: Stage the deal is moving to.
        now: Timestamp to stamp; defaults to the current UTC time.

    Returns:
        {won_date, actual_close_date} for contract_signed, {lost_date} for
        lost, and an empty dict for every other stage.
    """
    value = _stage_value(target)
    if value == WON_STAGE.value:
        stamp = now or datetime.now(timezone.utc)
        return {"won_date": stamp, "actual_close_date": stamp}
    if value == LOST_STAGE.value:
        return {"lost_date": now or datetime.now(timezone.utc)}
    return {}


def build_stage_update(
    target: DealStage | str, now: datetime | None = None
) -> dict[str, Any]:
    """Full update object for a stage move: ``{stage: target}`` plus stamps."""
    return {"stage": _stage_value(target), **stage_change_fields(target, now)}


def describe_move(from_stage: DealStage | str, to_stage: DealStage | str) -> MoveDirection:
    """Classify a move relative to STAGE_ORDER."""
    src, dst = _stage_value(from_stage), _stage_value(to_stage)
    if src == dst:
        return MoveDirection.SAME
    if dst in {s.value for s in EXCEPTION_STAGES}:
        return MoveDirection.EXCEPTION

    src_idx, dst_idx = stage_index(src), stage_index(dst)
    if src_idx is None or dst_idx is None:
        return MoveDirection.EXCEPTION
    return MoveDirection.FORWARD if dst_idx > src_idx else MoveDirection.BACKWARD
