from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List

from .dedup import TriggerDeduplicator
from .errors import ValidationError
from .models import Alarm, normalize_days, normalize_time
from .session import AlertSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClockReading:
    hour: int
    minute: int
    second: int
    weekday: int  # 0=Sunday ... 6=Saturday

    @classmethod
    def from_datetime(cls, dt: datetime) -> "ClockReading":
        return cls(hour=dt.hour, minute=dt.minute, second=dt.second, weekday=dt.isoweekday() % 7)

    @property
    def time_key(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def alarm_matches(alarm: Alarm, reading: ClockReading) -> bool:
    if not alarm.enabled:
        return False
    try:
        time_key = normalize_time(alarm.time)
        days = normalize_days(alarm.days)
    except ValidationError as exc:
        logger.warning("Treating malformed alarm %s as disabled: %s", alarm.id, exc)
        return False
    if time_key != reading.time_key:
        return False
    return not days or reading.weekday in days


class OccurrenceEvaluator:
    def __init__(self, deduplicator: TriggerDeduplicator, session: AlertSession):
        self.deduplicator = deduplicator
        self.session = session

    def evaluate(self, reading: ClockReading, alarms: Iterable[Alarm]) -> List[Alarm]:
        """Fire every alarm due at ``reading``; return them in firing order.

        Only the sample at second zero is looked at, so a minute is matched
        once no matter how many ticks land inside it.
        """

        if reading.second != 0:
            return []
        fired: List[Alarm] = []
        for alarm in alarms:
            if not alarm_matches(alarm, reading):
                continue
            if self.deduplicator.has_fired(alarm.id, reading.time_key):
                continue
            self.deduplicator.mark_fired(alarm.id, reading.time_key)
            self.session.trigger(alarm)
            fired.append(alarm)
        return fired
