from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List

from .errors import PersistenceError
from .models import ALL_DAYS, Alarm

logger = logging.getLogger(__name__)


def default_alarms() -> List[Alarm]:
    return [
        Alarm(id=1, time="07:30", enabled=True),
        Alarm(id=2, time="08:00", days=ALL_DAYS, enabled=False),
        Alarm(id=3, time="09:45", days=ALL_DAYS, enabled=True),
    ]


class JsonAlarmStorage:
    """Keeps the alarm list in a JSON file."""

    def __init__(self, path: Path, seed_defaults: bool = True):
        self.path = Path(path)
        self.seed_defaults = seed_defaults

    def load(self) -> List[Alarm]:
        if not self.path.exists():
            logger.info("No alarm file at %s, starting with %s", self.path, "defaults" if self.seed_defaults else "nothing")
            return default_alarms() if self.seed_defaults else []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Failed to load alarms from %s: %s", self.path, exc)
            return []
        if isinstance(payload, dict):
            payload = payload.get("alarms")
        if not isinstance(payload, list):
            logger.error("Alarm file %s does not hold a list, ignoring it", self.path)
            return []
        alarms: List[Alarm] = []
        seen = set()
        for item in payload:
            try:
                alarm = Alarm.from_dict(item)
            except (TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping alarm item due to parse error: %s", exc)
                continue
            if alarm.id is None or alarm.id in seen:
                logger.warning("Skipping alarm item with missing or duplicate id %s", alarm.id)
                continue
            seen.add(alarm.id)
            alarms.append(alarm)
        return alarms

    def save(self, alarms: List[Alarm]) -> None:
        serializable = [a.to_dict() for a in alarms]
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(serializable, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise PersistenceError(f"Failed to save alarms to {self.path}: {exc}") from exc


class MemoryAlarmStorage:
    def __init__(self, alarms: List[Alarm] | None = None):
        self.alarms: List[Alarm] = list(alarms or [])
        self.save_count = 0

    def load(self) -> List[Alarm]:
        return list(self.alarms)

    def save(self, alarms: List[Alarm]) -> None:
        self.save_count += 1
        self.alarms = list(alarms)
