from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Protocol, Union

from .models import Alarm, Tone

logger = logging.getLogger(__name__)


class AudioOutput(Protocol):
    def play(self, tone: Optional[Tone], loop: bool = True) -> None: ...

    def stop(self) -> None: ...


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Ringing:
    alarm: Alarm


SessionState = Union[Idle, Ringing]


class AlertSession:
    """Single slot for the alarm that is currently ringing.

    A trigger always lands in ``Ringing`` (replacing whatever was ringing
    before), and a dismiss always lands in ``Idle``.
    """

    def __init__(self, audio: AudioOutput):
        self.audio = audio
        self._state: SessionState = Idle()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_ringing(self) -> bool:
        return isinstance(self._state, Ringing)

    @property
    def alarm(self) -> Optional[Alarm]:
        if isinstance(self._state, Ringing):
            return self._state.alarm
        return None

    def trigger(self, alarm: Alarm) -> None:
        previous = self.alarm
        # Keep our own copy so later edits or removal don't change what is shown.
        self._state = Ringing(replace(alarm))
        if previous is not None:
            logger.info("Alarm %s replaces ringing alarm %s", alarm.id, previous.id)
        else:
            logger.info("Alarm %s ringing (%s %s)", alarm.id, alarm.time, alarm.label or "")
        self.audio.play(alarm.tone, loop=True)

    def dismiss(self) -> Optional[Alarm]:
        current = self.alarm
        if current is None:
            return None
        self._state = Idle()
        self.audio.stop()
        logger.info("Alarm %s dismissed", current.id)
        return current
