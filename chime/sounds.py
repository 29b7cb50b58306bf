from __future__ import annotations

import logging
from pathlib import Path
from threading import Event, Lock, Thread
from typing import Callable, Optional, Protocol

from .models import Tone
from .tones import PcmAudio, decode_wav, ensure_alarm_sound

logger = logging.getLogger(__name__)


class PcmSink(Protocol):
    def play_bytes(self, audio_bytes: bytes) -> None: ...

    def close(self) -> None: ...


class AlarmSoundPlayer:
    """Loops an alarm tone until stopped.

    ``open_output`` builds a sink for a given PCM format; the app passes one
    backed by a PyAudio output stream. Tones that can't be decoded fall back
    to the default sound at ``sound_path``.
    """

    def __init__(
        self,
        sound_path: Path,
        open_output: Callable[[PcmAudio], PcmSink],
        chunk_seconds: float = 0.1,
        join_timeout: float = 2.0,
    ):
        self.sound_path = Path(sound_path)
        self.open_output = open_output
        self.chunk_seconds = chunk_seconds
        self.join_timeout = join_timeout
        self._stop_event: Optional[Event] = None
        self._lock = Lock()
        self._thread: Optional[Thread] = None
        self._default: Optional[PcmAudio] = None

    @property
    def playing(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def play(self, tone: Optional[Tone], loop: bool = True) -> None:
        audio = self._resolve(tone)
        with self._lock:
            self._halt()
            # Fresh event per thread: one that outlived its join stays stopped.
            self._stop_event = Event()
            self._thread = Thread(
                target=self._play_loop, args=(audio, loop, self._stop_event), name="alarm-sound", daemon=True
            )
            self._thread.start()
        logger.debug("Playing %s (loop=%s)", tone.name if tone else "default tone", loop)

    def stop(self) -> None:
        with self._lock:
            self._halt()

    def _halt(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self.join_timeout)
            if self._thread.is_alive():
                logger.warning("Previous alarm sound thread did not stop in time")
        self._thread = None

    def _resolve(self, tone: Optional[Tone]) -> PcmAudio:
        if tone is not None:
            try:
                return decode_wav(tone.data)
            except ValueError as exc:
                logger.warning("Cannot play tone %s, using default: %s", tone.name, exc)
        if self._default is None:
            ensure_alarm_sound(self.sound_path)
            self._default = decode_wav(self.sound_path.read_bytes())
        return self._default

    def _play_loop(self, audio: PcmAudio, loop: bool, stop_event: Event) -> None:
        frame_size = audio.channels * audio.sample_width
        chunk_size = max(frame_size, int(audio.rate * self.chunk_seconds) * frame_size)
        try:
            sink = self.open_output(audio)
        except Exception:
            logger.error("Failed to open audio output", exc_info=True)
            return
        try:
            while not stop_event.is_set():
                for offset in range(0, len(audio.frames), chunk_size):
                    if stop_event.is_set():
                        return
                    sink.play_bytes(audio.frames[offset : offset + chunk_size])
                if not loop or not audio.frames:
                    return
        except Exception:
            logger.error("Alarm playback failed", exc_info=True)
        finally:
            sink.close()
