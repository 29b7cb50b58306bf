from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Optional

from .errors import NotFoundError, ValidationError
from .formatting import describe_alarm
from .manager import AlarmClock
from .models import ALL_DAYS, Alarm, Tone

logger = logging.getLogger(__name__)

DAY_WORDS = {
    "sun": 0,
    "mon": 1,
    "tue": 2,
    "wed": 3,
    "thu": 4,
    "fri": 5,
    "sat": 6,
}

DAY_GROUPS = {
    "daily": ALL_DAYS,
    "everyday": ALL_DAYS,
    "weekdays": frozenset({1, 2, 3, 4, 5}),
    "weekends": frozenset({0, 6}),
}

TIME_RE = re.compile(r"^\d{1,2}:\d{2}$")

HELP_TEXT = (
    "Commands: list | add HH:MM [days] [label] | edit ID HH:MM [days] [label] | "
    "delete ID | on ID | off ID | toggle ID | tone ID PATH|default | dismiss | quit"
)


@dataclass
class Command:
    action: str
    alarm_id: Optional[int] = None
    time: Optional[str] = None
    days: Optional[FrozenSet[int]] = None
    label: Optional[str] = None
    tone_path: Optional[str] = None
    error: Optional[str] = None
    raw_text: str = ""


def parse_days(token: str) -> Optional[FrozenSet[int]]:
    """Parse ``daily``, ``weekdays``, ``mon,wed`` or ``1,3,5``; None if the token is not a day list."""

    lower = token.lower()
    if lower in DAY_GROUPS:
        return DAY_GROUPS[lower]
    days = set()
    for part in lower.split(","):
        part = part.strip()
        if part.isalpha() and part[:3] in DAY_WORDS:
            days.add(DAY_WORDS[part[:3]])
        elif part.isdigit() and 0 <= int(part) <= 6:
            days.add(int(part))
        else:
            return None
    return frozenset(days)


def parse_command(text: str) -> Optional[Command]:
    """Parse one console line into a structured command."""

    cleaned = text.strip()
    if not cleaned:
        return None
    words = cleaned.split()
    verb = words[0].lower()
    args = words[1:]

    if verb in ("list", "ls", "alarms"):
        return Command(action="list", raw_text=cleaned)
    if verb in ("dismiss", "stop"):
        return Command(action="dismiss", raw_text=cleaned)
    if verb in ("help", "?"):
        return Command(action="help", raw_text=cleaned)
    if verb in ("quit", "exit"):
        return Command(action="quit", raw_text=cleaned)

    if verb in ("add", "edit"):
        if verb == "edit":
            alarm_id = _parse_id(args[:1])
            if alarm_id is None:
                return _unknown(cleaned, "Which alarm? Use: edit ID HH:MM [days] [label]")
            args = args[1:]
        else:
            alarm_id = None
        if not args or not TIME_RE.match(args[0]):
            return _unknown(cleaned, "Time must look like HH:MM, e.g. 07:30")
        time_value, rest = args[0], args[1:]
        days: FrozenSet[int] = frozenset()
        if rest:
            parsed_days = parse_days(rest[0])
            if parsed_days is not None:
                days, rest = parsed_days, rest[1:]
        return Command(
            action=verb,
            alarm_id=alarm_id,
            time=time_value,
            days=days,
            label=" ".join(rest),
            raw_text=cleaned,
        )

    if verb in ("delete", "remove", "rm", "on", "off", "toggle"):
        alarm_id = _parse_id(args)
        if alarm_id is None:
            return _unknown(cleaned, f"Which alarm? Use: {verb} ID")
        action = {"remove": "delete", "rm": "delete"}.get(verb, verb)
        return Command(action=action, alarm_id=alarm_id, raw_text=cleaned)

    if verb == "tone":
        alarm_id = _parse_id(args[:1])
        if alarm_id is None or len(args) < 2:
            return _unknown(cleaned, "Use: tone ID PATH or tone ID default")
        return Command(action="tone", alarm_id=alarm_id, tone_path=" ".join(args[1:]), raw_text=cleaned)

    return _unknown(cleaned, f"Unknown command {verb!r}. {HELP_TEXT}")


def _parse_id(args) -> Optional[int]:
    if not args:
        return None
    token = args[0].lstrip("#")
    return int(token) if token.isdigit() else None


def _unknown(text: str, error: str) -> Command:
    return Command(action="unknown", error=error, raw_text=text)


@dataclass
class CommandResult:
    handled: bool
    response_text: Optional[str] = None
    action: Optional[str] = None


class CommandRouter:
    def __init__(self, clock: AlarmClock):
        self.clock = clock

    def handle_text(self, text: str) -> Optional[CommandResult]:
        parsed = parse_command(text)
        if not parsed:
            return None
        logger.debug("Command parsed: %s", parsed)
        try:
            return self._dispatch(parsed)
        except ValidationError as exc:
            return CommandResult(handled=True, response_text=f"Invalid alarm: {exc}", action=parsed.action)
        except NotFoundError:
            return CommandResult(
                handled=True, response_text=f"No alarm #{parsed.alarm_id}.", action=parsed.action
            )

    def _dispatch(self, parsed: Command) -> CommandResult:
        registry = self.clock.registry

        if parsed.action == "unknown":
            return CommandResult(handled=True, response_text=parsed.error, action="unknown")

        if parsed.action == "help":
            return CommandResult(handled=True, response_text=HELP_TEXT, action="help")

        if parsed.action == "list":
            alarms = registry.snapshot()
            if not alarms:
                resp = "No alarms yet."
            else:
                resp = "\n".join(describe_alarm(a) for a in alarms)
            return CommandResult(handled=True, response_text=resp, action="list")

        if parsed.action == "add":
            alarms = registry.add(Alarm(time=parsed.time, days=parsed.days or frozenset(), label=parsed.label or ""))
            return CommandResult(handled=True, response_text=f"Added {describe_alarm(alarms[-1])}", action="add")

        if parsed.action == "edit":
            registry.update(parsed.alarm_id, time=parsed.time, days=parsed.days or frozenset(), label=parsed.label or "")
            return CommandResult(
                handled=True, response_text=f"Saved {describe_alarm(registry.get(parsed.alarm_id))}", action="edit"
            )

        if parsed.action == "delete":
            registry.remove(parsed.alarm_id)
            return CommandResult(handled=True, response_text=f"Deleted alarm #{parsed.alarm_id}.", action="delete")

        if parsed.action in ("on", "off", "toggle"):
            if parsed.action == "toggle":
                registry.toggle(parsed.alarm_id)
            else:
                registry.set_enabled(parsed.alarm_id, parsed.action == "on")
            return CommandResult(
                handled=True, response_text=describe_alarm(registry.get(parsed.alarm_id)), action=parsed.action
            )

        if parsed.action == "tone":
            tone = None
            if parsed.tone_path.lower() != "default":
                path = Path(parsed.tone_path).expanduser()
                try:
                    tone = Tone(name=path.name, data=path.read_bytes())
                except OSError as exc:
                    return CommandResult(handled=True, response_text=f"Cannot read {path}: {exc}", action="tone")
            registry.update(parsed.alarm_id, tone=tone)
            return CommandResult(
                handled=True, response_text=f"Tone set: {describe_alarm(registry.get(parsed.alarm_id))}", action="tone"
            )

        if parsed.action == "dismiss":
            current = self.clock.dismiss()
            resp = f"Dismissed alarm #{current.id}." if current else "Nothing is ringing."
            return CommandResult(handled=True, response_text=resp, action="dismiss")

        return CommandResult(handled=True, response_text=None, action=parsed.action)
