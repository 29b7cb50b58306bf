"""Alarm clock engine: registry, occurrence evaluation and the ringing alert."""

from .errors import ChimeError, NotFoundError, PersistenceError, ValidationError
from .manager import AlarmClock
from .models import Alarm, Tone
from .registry import AlarmRegistry
from .session import AlertSession, Idle, Ringing
from .storage import JsonAlarmStorage, MemoryAlarmStorage
