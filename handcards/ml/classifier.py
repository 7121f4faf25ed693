from __future__ import annotations

from enum import Enum
from typing import Optional

from .landmarks import (
    LandmarkFrame,
    WRIST,
    THUMB_TIP,
    INDEX_MCP,
    FINGER_TIPS,
    FINGER_MCPS,
)
from .runtime import GestureConfig


class GestureSymbol(str, Enum):
    AFFIRM = "affirm"      # thumbs up
    REJECT = "reject"      # thumbs down
    DEFER = "defer"        # flat hand
    NONE = "none"


_DEFAULT_CONFIG = GestureConfig()


def thumb_direction(frame: LandmarkFrame, dx_threshold: float) -> Optional[str]:
    """
    "up" / "down" when the thumb tip sits above / below the wrist and is pushed
    sideways away from the index knuckle, otherwise None.
    """
    dx = frame.x(THUMB_TIP) - frame.x(INDEX_MCP)
    if abs(dx) <= dx_threshold:
        return None

    thumb_y = frame.y(THUMB_TIP)
    wrist_y = frame.y(WRIST)
    if thumb_y < wrist_y:
        return "up"
    if thumb_y > wrist_y:
        return "down"
    return None


def extended_fingers(frame: LandmarkFrame) -> int:
    """Index..pinky with the tip above its knuckle."""
    return sum(1 for tip, mcp in zip(FINGER_TIPS, FINGER_MCPS) if frame.y(tip) < frame.y(mcp))


def classify(frame: Optional[LandmarkFrame], config: GestureConfig = _DEFAULT_CONFIG) -> GestureSymbol:
    if frame is None:
        return GestureSymbol.NONE

    flat = extended_fingers(frame) >= config.min_extended_fingers
    thumb = thumb_direction(frame, config.thumb_dx_threshold)

    # an open palm also lifts the thumb over the wrist, so thumb poses need curled fingers
    if thumb == "up" and not flat:
        return GestureSymbol.AFFIRM
    if thumb == "down" and not flat:
        return GestureSymbol.REJECT
    if flat:
        return GestureSymbol.DEFER
    return GestureSymbol.NONE


def describe(frame: Optional[LandmarkFrame], config: GestureConfig = _DEFAULT_CONFIG) -> dict:
    if frame is None:
        return {"hand": False, "thumb": None, "extended": 0, "symbol": GestureSymbol.NONE.value}
    return {
        "hand": True,
        "thumb": thumb_direction(frame, config.thumb_dx_threshold),
        "extended": extended_fingers(frame),
        "symbol": classify(frame, config).value,
    }
