from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from .models import ALL_DAYS, Alarm

DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def format_days(days: Iterable[int]) -> str:
    days = frozenset(days)
    if not days:
        return ""
    if days == ALL_DAYS:
        return "Every day"
    return " ".join(DAY_NAMES[d] for d in sorted(days))


def format_schedule(days: Iterable[int], today: Optional[date] = None) -> str:
    """Day list for repeating alarms, today's date (``Mon, Oct 19``) otherwise."""

    label = format_days(days)
    if label:
        return label
    today = today or date.today()
    return f"{today:%a}, {today:%b} {today.day}"


def describe_alarm(alarm: Alarm, today: Optional[date] = None) -> str:
    parts = [f"#{alarm.id}", alarm.time]
    if alarm.label:
        parts.append(alarm.label)
    parts.append(f"[{format_schedule(alarm.days, today)}]")
    if alarm.tone:
        parts.append(f"tone={alarm.tone.name}")
    parts.append("on" if alarm.enabled else "off")
    return " ".join(parts)
