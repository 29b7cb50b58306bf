from __future__ import annotations

import io
import logging
import wave
from dataclasses import dataclass
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 24000


@dataclass
class PcmAudio:
    frames: bytes
    rate: int
    channels: int
    sample_width: int

    @property
    def duration_seconds(self) -> float:
        frame_size = self.channels * self.sample_width
        if not frame_size or not self.rate:
            return 0.0
        return len(self.frames) / frame_size / self.rate


def synthesize_beep(
    duration_seconds: float = 1.5,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    freq: float = 880.0,
    amplitude: float = 0.4,
    beep_seconds: float = 0.25,
    gap_seconds: float = 0.25,
) -> np.ndarray:
    """Return int16 samples of an on/off beep pattern."""

    t = np.arange(int(duration_seconds * sample_rate)) / sample_rate
    tone = amplitude * np.sin(2 * np.pi * freq * t)
    period = beep_seconds + gap_seconds
    gate = (t % period) < beep_seconds
    return (tone * gate * 32767).astype(np.int16)


def encode_wav(samples: np.ndarray, sample_rate: int = DEFAULT_SAMPLE_RATE) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(samples.astype("<i2").tobytes())
    return buf.getvalue()


def decode_wav(data: bytes) -> PcmAudio:
    """Decode a WAV payload; raises ValueError for anything else."""

    try:
        with wave.open(io.BytesIO(data), "rb") as wav:
            return PcmAudio(
                frames=wav.readframes(wav.getnframes()),
                rate=wav.getframerate(),
                channels=wav.getnchannels(),
                sample_width=wav.getsampwidth(),
            )
    except (wave.Error, EOFError) as exc:
        raise ValueError(f"Unsupported audio payload: {exc}") from exc


def ensure_alarm_sound(path: Path, duration_seconds: float = 1.5) -> None:
    path = Path(path)
    if path.exists():
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_wav(synthesize_beep(duration_seconds)))
    logger.info("Generated default alarm sound at %s", path)
