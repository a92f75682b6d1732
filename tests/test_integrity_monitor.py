import pytest

from assessment_app.core.models import IntegrityEvent
from assessment_app.core.services.integrity_monitor import IntegrityMonitor, MonitorState
from assessment_app.core.services.signal_bus import SignalBus


def _monitor(running=True, max_attempts=3):
    calls = {"cap": 0, "infractions": []}
    monitor = IntegrityMonitor(
        max_attempts,
        is_running=lambda: running,
        on_cap_reached=lambda: calls.__setitem__("cap", calls["cap"] + 1),
        on_infraction=lambda kind, count: calls["infractions"].append((kind, count)),
    )
    return monitor, calls


def test_arm_subscribes_every_kind():
    bus = SignalBus()
    monitor, _ = _monitor()
    monitor.arm(bus)
    assert monitor.state is MonitorState.ARMED
    for kind in IntegrityEvent:
        assert bus.subscriber_count(kind) == 1


def test_cap_reached_on_third_infraction():
    bus = SignalBus()
    monitor, calls = _monitor()
    monitor.arm(bus)

    bus.emit(IntegrityEvent.TAB_SWITCH)
    bus.emit(IntegrityEvent.TAB_SWITCH)
    assert calls["cap"] == 0
    bus.emit(IntegrityEvent.FORBIDDEN_SHORTCUT)

    assert calls["cap"] == 1
    assert monitor.infraction_count == 3
    assert monitor.latest_reason == "Shortcut used"
    assert calls["infractions"][-1] == (IntegrityEvent.FORBIDDEN_SHORTCUT, 3)


def test_signals_ignored_when_not_running():
    bus = SignalBus()
    monitor, calls = _monitor(running=False)
    monitor.arm(bus)
    bus.emit(IntegrityEvent.CLIPBOARD_PASTE)
    assert monitor.infraction_count == 0
    assert calls["infractions"] == []


def test_signals_ignored_before_arm():
    monitor, _ = _monitor()
    monitor.on_signal(IntegrityEvent.TAB_SWITCH)
    assert monitor.infraction_count == 0


def test_disarm_releases_subscriptions_and_is_idempotent():
    bus = SignalBus()
    monitor, _ = _monitor()
    monitor.arm(bus)
    monitor.disarm()
    monitor.disarm()

    assert monitor.state is MonitorState.TERMINATED
    assert bus.subscriber_count() == 0
    bus.emit(IntegrityEvent.TAB_SWITCH)
    assert monitor.infraction_count == 0


def test_cannot_rearm():
    bus = SignalBus()
    monitor, _ = _monitor()
    monitor.arm(bus)
    with pytest.raises(RuntimeError):
        monitor.arm(bus)


def test_event_reasons():
    assert IntegrityEvent.TAB_SWITCH.reason == "Tab switched"
    assert IntegrityEvent.FULLSCREEN_EXIT.reason == "Exited full-screen"
