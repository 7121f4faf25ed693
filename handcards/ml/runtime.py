from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yml"


@dataclass(frozen=True)
class LandmarkerOptions:
    num_hands: int = 1
    min_hand_detection_confidence: float = 0.5
    min_hand_presence_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


@dataclass(frozen=True)
class GestureConfig:
    thumb_dx_threshold: float = 30.0
    min_extended_fingers: int = 3
    dwell_ms: float = 3000.0
    infer_every_ms: int = 100
    ping_interval_s: float = 10.0
    landmarker: LandmarkerOptions = field(default_factory=LandmarkerOptions)


def _read_yaml(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_gesture_config(path: Optional[str] = None) -> GestureConfig:
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    raw = _read_yaml(config_path)

    c = raw.get("classifier", {})
    h = raw.get("hold", {})
    s = raw.get("stream", {})
    lm = raw.get("landmarker", {})
    defaults = GestureConfig()
    lm_defaults = LandmarkerOptions()

    return GestureConfig(
        thumb_dx_threshold=float(c.get("thumb_dx_threshold", defaults.thumb_dx_threshold)),
        min_extended_fingers=int(c.get("min_extended_fingers", defaults.min_extended_fingers)),
        dwell_ms=float(h.get("dwell_ms", defaults.dwell_ms)),
        infer_every_ms=int(s.get("infer_every_ms", defaults.infer_every_ms)),
        ping_interval_s=float(s.get("ping_interval_s", defaults.ping_interval_s)),
        landmarker=LandmarkerOptions(
            num_hands=int(lm.get("num_hands", lm_defaults.num_hands)),
            min_hand_detection_confidence=float(
                lm.get("min_hand_detection_confidence", lm_defaults.min_hand_detection_confidence)
            ),
            min_hand_presence_confidence=float(
                lm.get("min_hand_presence_confidence", lm_defaults.min_hand_presence_confidence)
            ),
            min_tracking_confidence=float(
                lm.get("min_tracking_confidence", lm_defaults.min_tracking_confidence)
            ),
        ),
    )
