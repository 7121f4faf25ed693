from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

# 21-point hand model
WRIST = 0
THUMB_TIP = 4
INDEX_MCP = 5
FINGER_TIPS = (8, 12, 16, 20)    # index, middle, ring, pinky
FINGER_MCPS = (5, 9, 13, 17)

NUM_LANDMARKS = 21


class LandmarkFrame:
    """
    One detected hand at one instant.
    points: np.ndarray (21, 2|3) in image coordinates, y grows downward.
    """

    __slots__ = ("points",)

    def __init__(self, points: np.ndarray):
        self.points = points

    @classmethod
    def from_points(cls, points) -> Optional["LandmarkFrame"]:
        """Returns None for anything that is not a usable 21-point hand."""
        if points is None:
            return None
        try:
            arr = np.array(points, dtype=np.float64)
        except (TypeError, ValueError):
            return None

        if arr.ndim != 2 or arr.shape[0] != NUM_LANDMARKS or arr.shape[1] not in (2, 3):
            return None
        if not np.all(np.isfinite(arr)):
            return None

        arr.setflags(write=False)
        return cls(arr)

    @classmethod
    def from_normalized(cls, landmarks: Sequence, width: int, height: int) -> Optional["LandmarkFrame"]:
        """MediaPipe normalized landmarks (x, y in 0..1) -> pixel space."""
        return cls.from_points([(lm.x * width, lm.y * height, lm.z * width) for lm in landmarks])

    def x(self, idx: int) -> float:
        return float(self.points[idx, 0])

    def y(self, idx: int) -> float:
        return float(self.points[idx, 1])

    def __len__(self):
        return len(self.points)

    def __repr__(self):
        return f"LandmarkFrame(wrist=({self.x(WRIST):.1f}, {self.y(WRIST):.1f}))"
