import pytest

from handcards.ml.classifier import GestureSymbol
from handcards.ml.hold import HoldConfirmation
from handcards.ml.runtime import GestureConfig


class MsClock:
    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t


@pytest.fixture
def ms_clock():
    return MsClock()


@pytest.fixture
def confirmed():
    return []


@pytest.fixture
def machine(ms_clock, confirmed):
    m = HoldConfirmation(GestureConfig(), clock=ms_clock)
    m.activate(on_confirm=confirmed.append)
    return m


def feed(machine, clock, frame, start, stop, step=100):
    """Deliver `frame` every `step` ms in [start, stop]; returns emitted symbols."""
    out = []
    t = start
    while t <= stop:
        clock.t = t
        symbol = machine.on_frame(frame)
        if symbol is not None:
            out.append(symbol)
        t += step
    return out


def test_stable_affirm_fires_exactly_once(machine, ms_clock, confirmed, hand):
    fired = feed(machine, ms_clock, hand("thumbs_up"), 0, 8000)

    assert fired == [GestureSymbol.AFFIRM]
    assert confirmed == [GestureSymbol.AFFIRM]
    assert machine.triggered is True
    assert machine.progress == 1.0


def test_no_event_before_dwell(machine, ms_clock, confirmed, hand):
    # first frame only registers the symbol, the hold starts on the next one
    fired = feed(machine, ms_clock, hand("thumbs_up"), 0, 3000)

    assert fired == []
    assert confirmed == []
    assert machine.progress == pytest.approx(2900 / 3000)


def test_progress_grows_with_hold(machine, ms_clock, hand):
    frame = hand("thumbs_down")
    feed(machine, ms_clock, frame, 0, 100)
    assert machine.hold_started_at == 100
    assert machine.progress == 0.0

    ms_clock.t = 1600
    machine.on_frame(frame)
    assert machine.progress == pytest.approx(0.5)


def test_symbol_switch_resets_progress_and_timer(machine, ms_clock, confirmed, hand):
    feed(machine, ms_clock, hand("thumbs_up"), 0, 2500)
    assert machine.progress > 0.7

    ms_clock.t = 2600
    assert machine.on_frame(hand("flat")) is None
    assert machine.progress == 0.0
    assert machine.current_symbol == GestureSymbol.DEFER
    assert machine.hold_started_at is None

    # the abandoned thumbs up never fires, the flat hand needs its own full dwell
    fired = feed(machine, ms_clock, hand("flat"), 2700, 5600)
    assert fired == []
    fired = feed(machine, ms_clock, hand("flat"), 5700, 6000)
    assert fired == [GestureSymbol.DEFER]
    assert confirmed == [GestureSymbol.DEFER]


def test_missing_hand_resets_hold(machine, ms_clock, confirmed, hand):
    feed(machine, ms_clock, hand("thumbs_up"), 0, 2000)

    ms_clock.t = 2100
    machine.on_frame(None)
    assert machine.progress == 0.0
    assert machine.current_symbol == GestureSymbol.NONE

    fired = feed(machine, ms_clock, hand("thumbs_up"), 2200, 5200)
    assert fired == []
    assert confirmed == []


def test_none_symbol_never_accumulates(machine, ms_clock, confirmed, hand):
    fired = feed(machine, ms_clock, hand("fist"), 0, 10000)
    assert fired == []
    assert machine.progress == 0.0
    assert machine.hold_started_at is None


def test_no_second_event_until_reactivated(machine, ms_clock, confirmed, hand):
    feed(machine, ms_clock, hand("thumbs_up"), 0, 3200)
    fired = feed(machine, ms_clock, hand("thumbs_down"), 3300, 9000)
    fired += feed(machine, ms_clock, hand("thumbs_up"), 9100, 15000)

    assert fired == []
    assert confirmed == [GestureSymbol.AFFIRM]

    machine.activate(on_confirm=confirmed.append)
    assert machine.triggered is False
    fired = feed(machine, ms_clock, hand("thumbs_down"), 20000, 23100)
    assert fired == [GestureSymbol.REJECT]


def test_deactivate_mid_hold_discards_progress(machine, ms_clock, confirmed, hand):
    feed(machine, ms_clock, hand("thumbs_up"), 0, 2500)

    machine.deactivate()
    assert machine.active is False
    assert machine.progress == 0.0
    assert machine.hold_started_at is None

    machine.activate(on_confirm=confirmed.append)
    fired = feed(machine, ms_clock, hand("thumbs_up"), 2600, 5600)
    assert fired == []
    fired = feed(machine, ms_clock, hand("thumbs_up"), 5700, 5700)
    assert fired == [GestureSymbol.AFFIRM]


def test_deactivate_is_idempotent(ms_clock):
    m = HoldConfirmation(clock=ms_clock)
    m.deactivate()
    m.deactivate()
    assert m.active is False
    assert m.current_symbol == GestureSymbol.NONE


def test_inactive_machine_ignores_frames(ms_clock, hand):
    m = HoldConfirmation(clock=ms_clock)
    fired = feed(m, ms_clock, hand("thumbs_up"), 0, 5000)
    assert fired == []
    assert m.current_symbol == GestureSymbol.NONE


def test_frame_timestamp_overrides_clock(ms_clock, hand):
    m = HoldConfirmation(clock=ms_clock)
    m.activate()
    frame = hand("thumbs_up")
    m.on_frame(frame, ts_ms=10)
    m.on_frame(frame, ts_ms=20)
    assert m.on_frame(frame, ts_ms=3019) is None
    assert m.on_frame(frame, ts_ms=3020) == GestureSymbol.AFFIRM


def test_callback_errors_do_not_escape(ms_clock, hand):
    def boom(symbol):
        raise RuntimeError("ui went away")

    m = HoldConfirmation(clock=ms_clock)
    m.activate(on_confirm=boom)
    fired = feed(m, ms_clock, hand("flat"), 0, 3100)
    assert fired == [GestureSymbol.DEFER]
