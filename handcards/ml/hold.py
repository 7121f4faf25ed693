from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .classifier import GestureSymbol, classify
from .landmarks import LandmarkFrame
from .runtime import GestureConfig

logger = logging.getLogger("handcards.hold")


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class HoldConfirmation:
    """
    Turns the per-frame classification stream into one confirmed gesture per
    activation window. A symbol must stay the same for dwell_ms before it fires;
    any change restarts the timer.

    Not reentrant: on_frame calls must be serialized by the caller.
    """

    def __init__(self, config: Optional[GestureConfig] = None, clock: Callable[[], float] = monotonic_ms):
        self.config = config or GestureConfig()
        self.clock = clock

        self.active = False
        self._on_confirm: Optional[Callable[[GestureSymbol], None]] = None
        self._reset()

    def _reset(self):
        self.current_symbol = GestureSymbol.NONE
        self.hold_started_at: Optional[float] = None
        self.triggered = False
        self._progress = 0.0

    @property
    def progress(self) -> float:
        return self._progress

    def activate(self, on_confirm: Optional[Callable[[GestureSymbol], None]] = None):
        self._reset()
        self._on_confirm = on_confirm
        self.active = True

    def deactivate(self):
        self._reset()
        self._on_confirm = None
        self.active = False

    def on_frame(self, frame: Optional[LandmarkFrame], ts_ms: Optional[float] = None) -> Optional[GestureSymbol]:
        """
        frame=None means no hand in view. Returns the confirmed symbol on the
        frame that completes the dwell, otherwise None.
        """
        if not self.active or self.triggered:
            return None

        symbol = classify(frame, self.config)

        if symbol != self.current_symbol:
            self.current_symbol = symbol
            self.hold_started_at = None
            self._progress = 0.0
            return None

        if symbol == GestureSymbol.NONE:
            self._progress = 0.0
            return None

        now = self.clock() if ts_ms is None else float(ts_ms)
        if self.hold_started_at is None:
            self.hold_started_at = now

        elapsed = now - self.hold_started_at
        dwell = self.config.dwell_ms
        self._progress = min(elapsed / dwell, 1.0) if dwell > 0 else 1.0

        if elapsed < dwell:
            return None

        self.triggered = True
        logger.info("gesture confirmed: %s after %.0f ms", symbol.value, elapsed)

        callback = self._on_confirm
        if callback is not None:
            try:
                callback(symbol)
            except Exception:
                logger.exception("gesture confirm callback failed")
        return symbol
