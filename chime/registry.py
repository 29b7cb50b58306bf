from __future__ import annotations

import logging
import time
from dataclasses import replace
from threading import Lock
from typing import Dict, List, Optional, Protocol

from .errors import NotFoundError, PersistenceError, ValidationError
from .models import Alarm

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"time", "days", "label", "tone", "enabled"})


class AlarmStorage(Protocol):
    def load(self) -> List[Alarm]: ...

    def save(self, alarms: List[Alarm]) -> None: ...


class AlarmRegistry:
    """Insertion-ordered collection of alarms.

    Every public operation takes the registry lock for its whole
    read-modify-write, so a tick never observes a half-applied change.
    Mutations return a fresh snapshot of the collection and are persisted
    through ``storage`` when one is attached.
    """

    def __init__(self, alarms: Optional[List[Alarm]] = None, storage: Optional[AlarmStorage] = None):
        self.storage = storage
        self._alarms: Dict[int, Alarm] = {}
        self._lock = Lock()
        self._last_id = 0
        for alarm in alarms or []:
            alarm = alarm.validated()
            if alarm.id is None:
                alarm.id = self._new_id()
            if alarm.id in self._alarms:
                logger.warning("Dropping alarm with duplicate id %s", alarm.id)
                continue
            self._alarms[alarm.id] = alarm
            self._last_id = max(self._last_id, alarm.id)

    @classmethod
    def from_storage(cls, storage: AlarmStorage) -> "AlarmRegistry":
        try:
            alarms = storage.load()
        except PersistenceError as exc:
            logger.error("Could not load alarms, starting empty: %s", exc)
            alarms = []
        registry = cls(alarms, storage=storage)
        logger.info("Loaded %s alarms", len(registry))
        return registry

    def __len__(self) -> int:
        with self._lock:
            return len(self._alarms)

    def __contains__(self, alarm_id) -> bool:
        with self._lock:
            return alarm_id in self._alarms

    def snapshot(self) -> List[Alarm]:
        with self._lock:
            return self._snapshot()

    def get(self, alarm_id: int) -> Alarm:
        with self._lock:
            return replace(self._require(alarm_id))

    def add(self, alarm: Alarm) -> List[Alarm]:
        alarm = alarm.validated()
        with self._lock:
            if alarm.id is not None and alarm.id in self._alarms:
                raise ValidationError(f"Alarm {alarm.id} already exists")
            self._insert(alarm)
            return self._commit()

    def save(self, alarm: Alarm) -> List[Alarm]:
        """Replace the alarm with the same id, or add it when it is new."""

        alarm = alarm.validated()
        with self._lock:
            if alarm.id is not None and alarm.id in self._alarms:
                self._alarms[alarm.id] = alarm
                logger.info("Saved alarm %s at %s", alarm.id, alarm.time)
            else:
                self._insert(alarm)
            return self._commit()

    def update(self, alarm_id: int, **fields) -> List[Alarm]:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update alarm fields: {', '.join(sorted(unknown))}")
        with self._lock:
            current = self._require(alarm_id)
            updated = replace(current, **fields).validated()
            self._alarms[alarm_id] = updated
            logger.info("Updated alarm %s (%s)", alarm_id, ", ".join(sorted(fields)) or "no fields")
            return self._commit()

    def remove(self, alarm_id: int) -> List[Alarm]:
        with self._lock:
            if self._alarms.pop(alarm_id, None) is None:
                logger.debug("Remove of unknown alarm %s ignored", alarm_id)
                return self._snapshot()
            logger.info("Removed alarm %s", alarm_id)
            return self._commit()

    def set_enabled(self, alarm_id: int, enabled: bool) -> List[Alarm]:
        with self._lock:
            alarm = self._require(alarm_id)
            alarm.enabled = bool(enabled)
            logger.info("Alarm %s %s", alarm_id, "enabled" if alarm.enabled else "disabled")
            return self._commit()

    def toggle(self, alarm_id: int) -> List[Alarm]:
        with self._lock:
            alarm = self._require(alarm_id)
            alarm.enabled = not alarm.enabled
            logger.info("Alarm %s %s", alarm_id, "enabled" if alarm.enabled else "disabled")
            return self._commit()

    def _insert(self, alarm: Alarm) -> None:
        if alarm.id is None:
            alarm.id = self._new_id()
        self._last_id = max(self._last_id, alarm.id)
        self._alarms[alarm.id] = alarm
        logger.info("Added alarm %s at %s (days=%s)", alarm.id, alarm.time, sorted(alarm.days))

    def _require(self, alarm_id) -> Alarm:
        alarm = self._alarms.get(alarm_id)
        if alarm is None:
            raise NotFoundError(alarm_id)
        return alarm

    def _new_id(self) -> int:
        # Millisecond timestamps, bumped past anything already handed out.
        self._last_id = max(self._last_id + 1, int(time.time() * 1000))
        return self._last_id

    def _snapshot(self) -> List[Alarm]:
        return [replace(a) for a in self._alarms.values()]

    def _commit(self) -> List[Alarm]:
        alarms = self._snapshot()
        if self.storage is not None:
            try:
                self.storage.save(alarms)
            except PersistenceError as exc:
                logger.warning("Alarm changes kept in memory only: %s", exc)
        return alarms
