import pytest

from chime.commands import CommandRouter, parse_command, parse_days
from chime.manager import AlarmClock
from chime.models import Alarm
from chime.registry import AlarmRegistry
from conftest import on_day


def _router(audio, alarms=None):
    clock = AlarmClock(AlarmRegistry(alarms or []), audio)
    return CommandRouter(clock), clock


def test_parse_add_with_days_and_label():
    result = parse_command("add 6:45 mon,wed,fri Morning run")
    assert result.action == "add"
    assert result.time == "6:45"
    assert result.days == frozenset({1, 3, 5})
    assert result.label == "Morning run"


def test_parse_add_without_days():
    result = parse_command("add 07:30 Wake up")
    assert result.days == frozenset()
    assert result.label == "Wake up"


@pytest.mark.parametrize(
    "token,expected",
    [
        ("daily", frozenset(range(7))),
        ("weekdays", frozenset({1, 2, 3, 4, 5})),
        ("Weekends", frozenset({0, 6})),
        ("1,3,5", frozenset({1, 3, 5})),
        ("sunday,saturday", frozenset({0, 6})),
        ("gym", None),
        ("1,9", None),
    ],
)
def test_parse_days(token, expected):
    assert parse_days(token) == expected


def test_parse_edit_and_remove():
    edit = parse_command("edit #12 08:00 weekdays")
    assert (edit.action, edit.alarm_id, edit.time, edit.days) == ("edit", 12, "08:00", frozenset({1, 2, 3, 4, 5}))
    assert parse_command("rm 3").action == "delete"
    assert parse_command("off 3").alarm_id == 3


def test_parse_errors():
    assert parse_command("") is None
    assert parse_command("add soon").action == "unknown"
    assert parse_command("delete").action == "unknown"
    assert parse_command("snooze 5").action == "unknown"


def test_router_add_and_list(audio):
    router, clock = _router(audio)
    result = router.handle_text("add 07:30 daily Wake up")
    assert result.action == "add"
    assert "07:30 Wake up [Every day] on" in result.response_text
    assert len(clock.registry) == 1
    assert "Wake up" in router.handle_text("list").response_text


def test_router_reports_validation_errors(audio):
    router, clock = _router(audio)
    result = router.handle_text("add 25:00")
    assert result.response_text.startswith("Invalid alarm")
    assert len(clock.registry) == 0


def test_router_reports_unknown_alarm(audio):
    router, _ = _router(audio)
    assert router.handle_text("toggle 5").response_text == "No alarm #5."


def test_router_edit_toggle_delete(audio):
    router, clock = _router(audio, [Alarm(id=1, time="07:30")])
    router.handle_text("edit 1 07:45 sat Lazy")
    assert clock.registry.get(1).time == "07:45"
    assert clock.registry.get(1).days == frozenset({6})
    router.handle_text("off 1")
    assert clock.registry.get(1).enabled is False
    router.handle_text("toggle 1")
    assert clock.registry.get(1).enabled is True
    router.handle_text("delete 1")
    assert router.handle_text("delete 1").action == "delete"
    assert len(clock.registry) == 0


def test_router_sets_tone_from_file(audio, tmp_path):
    path = tmp_path / "birds.wav"
    path.write_bytes(b"RIFFdata")
    router, clock = _router(audio, [Alarm(id=1, time="07:30")])
    router.handle_text(f"tone 1 {path}")
    assert clock.registry.get(1).tone.name == "birds.wav"
    router.handle_text("tone 1 default")
    assert clock.registry.get(1).tone is None
    assert "Cannot read" in router.handle_text(f"tone 1 {tmp_path / 'missing.wav'}").response_text


def test_router_dismiss(audio):
    router, clock = _router(audio, [Alarm(id=1, time="07:30")])
    assert router.handle_text("dismiss").response_text == "Nothing is ringing."
    clock.tick(on_day(1, 7, 30))
    assert router.handle_text("stop").response_text == "Dismissed alarm #1."
    assert not clock.is_ringing
