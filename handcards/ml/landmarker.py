from __future__ import annotations

import base64
import os
import time
from pathlib import Path
from typing import Optional

import cv2
import numpy as np
import mediapipe as mp

from .landmarks import LandmarkFrame
from .runtime import LandmarkerOptions


def decode_frame_bgr(data_url: str) -> np.ndarray:
    """data:image/jpeg;base64,... -> BGR uint8 image."""
    _, encoded = data_url.split(",", 1)
    img_bytes = base64.b64decode(encoded)
    img = cv2.imdecode(np.frombuffer(img_bytes, np.uint8), cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError("cv2.imdecode returned None")
    return img


class HandLandmarkerSession:
    """
    MediaPipe Tasks hand landmarker in VIDEO mode. Produces one pixel-space
    LandmarkFrame per image, or None when no hand is visible.
    Must be created and called from a single thread.
    """

    def __init__(self, options: Optional[LandmarkerOptions] = None, model_path: Optional[str] = None):
        options = options or LandmarkerOptions()
        self.model_path = self._resolve_model_path(model_path)

        BaseOptions = mp.tasks.BaseOptions
        HandLandmarker = mp.tasks.vision.HandLandmarker
        HandLandmarkerOptions = mp.tasks.vision.HandLandmarkerOptions
        RunningMode = mp.tasks.vision.RunningMode

        mp_options = HandLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=str(self.model_path)),
            running_mode=RunningMode.VIDEO,
            num_hands=options.num_hands,
            min_hand_detection_confidence=options.min_hand_detection_confidence,
            min_hand_presence_confidence=options.min_hand_presence_confidence,
            min_tracking_confidence=options.min_tracking_confidence,
        )

        self._landmarker = HandLandmarker.create_from_options(mp_options)
        self._last_ts_ms = 0

    def close(self) -> None:
        self._landmarker.close()

    @staticmethod
    def _resolve_model_path(model_path: Optional[str]) -> Path:
        """
        Looks for hand_landmarker.task, in order:
          1) explicit model_path
          2) env HANDCARDS_HAND_TASK_PATH
          3) repo root
          4) next to this file
          5) current directory
        """
        if model_path:
            p = Path(model_path).expanduser().resolve()
            if not p.exists():
                raise FileNotFoundError(f"hand_landmarker.task not found: {p}")
            return p

        envp = os.getenv("HANDCARDS_HAND_TASK_PATH", "").strip()
        if envp:
            p = Path(envp).expanduser().resolve()
            if not p.exists():
                raise FileNotFoundError(f"HANDCARDS_HAND_TASK_PATH points to a missing file: {p}")
            return p

        here = Path(__file__).resolve()
        # .../handcards/ml/landmarker.py -> repo root = parents[2]
        candidates = [
            here.parents[2] / "hand_landmarker.task",
            here.parent / "hand_landmarker.task",
            Path.cwd() / "hand_landmarker.task",
        ]
        for c in candidates:
            if c.exists():
                return c.resolve()

        raise FileNotFoundError(
            "hand_landmarker.task not found.\n"
            "Put it in the repository root or set HANDCARDS_HAND_TASK_PATH."
        )

    def _ensure_ts(self, ts_ms: int) -> int:
        # MediaPipe requires strictly increasing timestamps
        if ts_ms <= self._last_ts_ms:
            ts_ms = self._last_ts_ms + 1
        self._last_ts_ms = ts_ms
        return ts_ms

    def process_frame_bgr(self, frame_bgr: np.ndarray, ts_ms: Optional[int] = None) -> Optional[LandmarkFrame]:
        if ts_ms is None:
            ts_ms = int(time.monotonic() * 1000)
        ts_ms = self._ensure_ts(int(ts_ms))

        if frame_bgr is None or frame_bgr.ndim != 3 or frame_bgr.shape[2] != 3:
            return None

        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self._landmarker.detect_for_video(mp_image, ts_ms)

        if not result.hand_landmarks:
            return None

        h, w = frame_bgr.shape[:2]
        return LandmarkFrame.from_normalized(result.hand_landmarks[0], w, h)
