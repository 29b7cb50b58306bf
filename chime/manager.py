from __future__ import annotations

import logging
from datetime import datetime
from threading import Lock
from typing import Callable, List, Optional

from .dedup import TriggerDeduplicator
from .errors import NotFoundError
from .evaluator import ClockReading, OccurrenceEvaluator
from .models import Alarm
from .registry import AlarmRegistry
from .session import AlertSession, AudioOutput
from .ticker import PeriodicTicker

logger = logging.getLogger(__name__)


class AlarmClock:
    def __init__(
        self,
        registry: AlarmRegistry,
        sound_player: AudioOutput,
        now_fn: Optional[Callable[[], datetime]] = None,
        tick_interval: float = 1.0,
        clear_interval: float = 60.0,
        on_alarm_triggered: Optional[Callable[[Alarm], None]] = None,
        one_shot_empty_days: bool = False,
    ):
        self.registry = registry
        self.sound_player = sound_player
        self.now_fn = now_fn or (lambda: datetime.now().astimezone())
        self.on_alarm_triggered = on_alarm_triggered
        self.one_shot_empty_days = one_shot_empty_days

        self.deduplicator = TriggerDeduplicator()
        self.session = AlertSession(sound_player)
        self.evaluator = OccurrenceEvaluator(self.deduplicator, self.session)

        # Both tickers and user actions go through this lock, one at a time.
        self._lock = Lock()
        self._tick_timer = PeriodicTicker(tick_interval, self.tick, name="alarm-tick")
        self._clear_timer = PeriodicTicker(clear_interval, self.clear_triggered, name="alarm-dedup-clear")

    def start(self) -> None:
        self._tick_timer.start()
        self._clear_timer.start()
        logger.info(
            "Alarm clock started with %s alarms (tick=%.1fs, clear=%.0fs)",
            len(self.registry),
            self._tick_timer.interval,
            self._clear_timer.interval,
        )

    def shutdown(self) -> None:
        self._tick_timer.stop()
        self._clear_timer.stop()
        self.sound_player.stop()
        logger.info("Alarm clock stopped")

    @property
    def is_ringing(self) -> bool:
        with self._lock:
            return self.session.is_ringing

    @property
    def ringing_alarm(self) -> Optional[Alarm]:
        with self._lock:
            return self.session.alarm

    def tick(self, now: Optional[datetime] = None) -> List[Alarm]:
        reading = ClockReading.from_datetime(now or self.now_fn())
        alarms = self.registry.snapshot()
        with self._lock:
            fired = self.evaluator.evaluate(reading, alarms)
        for alarm in fired:
            if self.one_shot_empty_days and not alarm.days:
                self._disable_after_fire(alarm)
            if self.on_alarm_triggered:
                try:
                    self.on_alarm_triggered(alarm)
                except Exception:
                    logger.error("on_alarm_triggered callback failed", exc_info=True)
        return fired

    def clear_triggered(self) -> None:
        with self._lock:
            self.deduplicator.clear()

    def dismiss(self) -> Optional[Alarm]:
        with self._lock:
            return self.session.dismiss()

    def _disable_after_fire(self, alarm: Alarm) -> None:
        try:
            self.registry.set_enabled(alarm.id, False)
        except NotFoundError:
            logger.debug("One-shot alarm %s was removed before it could be disabled", alarm.id)
