from __future__ import annotations

import logging
from typing import Set, Tuple

logger = logging.getLogger(__name__)


class TriggerDeduplicator:
    """Remembers which ``(alarm id, "HH:MM")`` pairs already fired.

    The set is only ever emptied as a whole by :meth:`clear`, which runs on
    its own timer. Because that timer is not aligned to the minute rollover
    this is a best-effort debounce: a clear landing between two samples of
    the same matching second lets the alarm fire twice.
    """

    def __init__(self) -> None:
        self._fired: Set[Tuple[int, str]] = set()

    def __len__(self) -> int:
        return len(self._fired)

    def has_fired(self, alarm_id: int, time_key: str) -> bool:
        return (alarm_id, time_key) in self._fired

    def mark_fired(self, alarm_id: int, time_key: str) -> None:
        self._fired.add((alarm_id, time_key))

    def clear(self) -> None:
        if self._fired:
            logger.debug("Clearing %s trigger records", len(self._fired))
        self._fired.clear()
