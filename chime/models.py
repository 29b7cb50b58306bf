from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field, replace
from datetime import time as dt_time
from typing import FrozenSet, Iterable, Optional, Tuple

from .errors import ValidationError

ALL_DAYS: FrozenSet[int] = frozenset(range(7))

TIME_OF_DAY_RE = re.compile(r"(\d{1,2}):(\d{2})(?::(\d{2}))?", re.ASCII)


def parse_time_of_day(value) -> Tuple[int, int]:
    """Return ``(hour, minute)`` for an ``"HH:MM"`` string or a ``datetime.time``."""

    if isinstance(value, dt_time):
        return value.hour, value.minute
    if not isinstance(value, str):
        raise ValidationError(f"Alarm time must be a string like '07:30', got {value!r}")
    match = TIME_OF_DAY_RE.fullmatch(value.strip())
    if not match:
        raise ValidationError(f"Alarm time must look like HH:MM, got {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    if not 0 <= hour <= 23 or not 0 <= minute <= 59 or not 0 <= second <= 59:
        raise ValidationError(f"Alarm time {value!r} is outside 00:00-23:59")
    return hour, minute


def normalize_time(value) -> str:
    hour, minute = parse_time_of_day(value)
    return f"{hour:02d}:{minute:02d}"


def normalize_days(values: Optional[Iterable[int]]) -> FrozenSet[int]:
    if values is None:
        return frozenset()
    if isinstance(values, (str, bytes)):
        raise ValidationError("Alarm days must be a collection of weekday numbers")
    days = set()
    for value in values:
        # bool is an int subclass, but True/False are never weekdays
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"Weekday must be an integer 0-6, got {value!r}")
        if not 0 <= value <= 6:
            raise ValidationError(f"Weekday {value} is outside 0 (Sunday) - 6 (Saturday)")
        days.add(value)
    return frozenset(days)


@dataclass(frozen=True)
class Tone:
    name: str
    data: bytes = field(repr=False)

    def to_dict(self) -> dict:
        return {"name": self.name, "data": base64.b64encode(self.data).decode("ascii")}

    @classmethod
    def from_dict(cls, data: dict) -> "Tone":
        raw = data.get("data")
        if not isinstance(raw, str) or not raw:
            raise ValueError("Tone payload missing data")
        return cls(name=str(data.get("name") or "tone"), data=_decode_blob(raw))


def _decode_blob(raw: str) -> bytes:
    # Browser uploads arrive as data URLs: "data:audio/wav;base64,...."
    if raw.startswith("data:"):
        _, _, raw = raw.partition(",")
    try:
        return base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Tone data is not valid base64: {exc}") from exc


@dataclass
class Alarm:
    time: str
    days: FrozenSet[int] = frozenset()
    label: str = ""
    tone: Optional[Tone] = None
    enabled: bool = True
    id: Optional[int] = None

    def validated(self) -> "Alarm":
        """Return a normalised copy, raising ValidationError on bad time/days."""

        if self.id is not None and (isinstance(self.id, bool) or not isinstance(self.id, int)):
            raise ValidationError(f"Alarm id must be an integer, got {self.id!r}")
        if self.tone is not None and not isinstance(self.tone, Tone):
            raise ValidationError("Alarm tone must be a Tone or None")
        if not isinstance(self.enabled, bool):
            raise ValidationError(f"Alarm enabled flag must be True or False, got {self.enabled!r}")
        return replace(
            self,
            time=normalize_time(self.time),
            days=normalize_days(self.days),
            label=str(self.label or ""),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "time": self.time,
            "days": sorted(self.days),
            "label": self.label,
            "tone": self.tone.to_dict() if self.tone else None,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Alarm":
        if "time" not in data:
            raise ValueError("Alarm payload missing time field")
        tone = None
        if data.get("tone"):
            tone = Tone.from_dict(data["tone"])
        elif data.get("toneData"):
            tone = Tone(name=str(data.get("toneName") or "tone"), data=_decode_blob(data["toneData"]))
        alarm_id = data.get("id")
        # Anything but a real bool (e.g. a hand-edited "false") counts as off.
        enabled = data.get("enabled", True)
        return cls(
            id=int(alarm_id) if alarm_id is not None else None,
            time=data["time"],
            days=data.get("days") or (),
            label=data.get("label") or "",
            tone=tone,
            enabled=enabled if isinstance(enabled, bool) else False,
        ).validated()
