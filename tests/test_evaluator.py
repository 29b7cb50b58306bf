from datetime import datetime

import pytest

from chime.dedup import TriggerDeduplicator
from chime.evaluator import ClockReading, OccurrenceEvaluator, alarm_matches
from chime.models import Alarm
from chime.session import AlertSession
from conftest import on_day


def _evaluator(audio):
    dedup = TriggerDeduplicator()
    session = AlertSession(audio)
    return OccurrenceEvaluator(dedup, session), dedup, session


def test_reading_weekday_is_sunday_based():
    assert ClockReading.from_datetime(on_day(0, 7, 30)).weekday == 0
    assert ClockReading.from_datetime(on_day(6, 7, 30)).weekday == 6
    assert ClockReading.from_datetime(datetime(2025, 1, 6, 9, 5, 7)) == ClockReading(9, 5, 7, 1)
    assert ClockReading(9, 5, 7, 1).time_key == "09:05"


@pytest.mark.parametrize("weekday", range(7))
def test_empty_days_fire_every_day(audio, weekday):
    evaluator, _, _ = _evaluator(audio)
    alarm = Alarm(id=1, time="07:30")
    fired = evaluator.evaluate(ClockReading.from_datetime(on_day(weekday, 7, 30)), [alarm])
    assert [a.id for a in fired] == [1]


@pytest.mark.parametrize("weekday,expected", [(0, False), (1, True), (2, False), (3, True), (4, False), (5, True), (6, False)])
def test_day_filtering(weekday, expected):
    alarm = Alarm(id=1, time="07:30", days=frozenset({1, 3, 5}))
    assert alarm_matches(alarm, ClockReading.from_datetime(on_day(weekday, 7, 30))) is expected


def test_disabled_alarm_never_fires(audio):
    evaluator, dedup, session = _evaluator(audio)
    alarm = Alarm(id=1, time="07:30", enabled=False)
    for weekday in range(7):
        assert evaluator.evaluate(ClockReading.from_datetime(on_day(weekday, 7, 30)), [alarm]) == []
    assert len(dedup) == 0
    assert not session.is_ringing
    assert audio.calls == []


def test_only_second_zero_is_evaluated(audio):
    evaluator, _, _ = _evaluator(audio)
    alarm = Alarm(id=1, time="07:30")
    for second in range(1, 60):
        assert evaluator.evaluate(ClockReading(7, 30, second, 2), [alarm]) == []
    assert audio.calls == []


def test_other_minutes_do_not_match(audio):
    evaluator, _, _ = _evaluator(audio)
    alarm = Alarm(id=1, time="07:30")
    assert evaluator.evaluate(ClockReading(7, 29, 0, 2), [alarm]) == []
    assert evaluator.evaluate(ClockReading(19, 30, 0, 2), [alarm]) == []


def test_fire_records_trigger_and_rings(audio):
    evaluator, dedup, session = _evaluator(audio)
    alarm = Alarm(id=1, time="07:30")
    evaluator.evaluate(ClockReading(7, 30, 0, 3), [alarm])
    assert dedup.has_fired(1, "07:30")
    assert session.alarm.id == 1
    assert audio.calls == [("play", None, True)]


def test_same_time_alarms_fire_independently_last_one_wins(audio):
    evaluator, dedup, session = _evaluator(audio)
    a = Alarm(id=1, time="07:30", label="A")
    b = Alarm(id=2, time="07:30", days=frozenset({3}), label="B")
    fired = evaluator.evaluate(ClockReading(7, 30, 0, 3), [a, b])
    assert [x.id for x in fired] == [1, 2]
    assert dedup.has_fired(1, "07:30") and dedup.has_fired(2, "07:30")
    assert session.alarm.label == "B"
    assert len(audio.plays) == 2


def test_malformed_alarm_is_treated_as_disabled(audio):
    evaluator, _, session = _evaluator(audio)
    broken = Alarm(id=1, time="7h30")
    bad_days = Alarm(id=2, time="07:30", days=frozenset({9}))
    good = Alarm(id=3, time="07:30")
    fired = evaluator.evaluate(ClockReading(7, 30, 0, 3), [broken, bad_days, good])
    assert [a.id for a in fired] == [3]
    assert session.alarm.id == 3
