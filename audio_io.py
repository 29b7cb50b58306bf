import logging
from typing import Optional

import pyaudio

logger = logging.getLogger(__name__)


def create_pyaudio() -> pyaudio.PyAudio:
    pa = pyaudio.PyAudio()
    return pa


class AudioPlayer:
    def __init__(
        self,
        pa: pyaudio.PyAudio,
        rate: int,
        channels: int = 1,
        sample_width: int = 2,
        device_index: Optional[int] = None,
    ):
        self.pa = pa
        self.rate = rate
        self.channels = channels
        self.sample_width = sample_width
        self.stream = self.pa.open(
            format=self.pa.get_format_from_width(sample_width),
            channels=channels,
            rate=rate,
            output=True,
            output_device_index=device_index,
        )
        logger.debug("Opened output stream rate=%s channels=%s width=%s", rate, channels, sample_width)

    def play_bytes(self, audio_bytes: bytes) -> None:
        self.stream.write(audio_bytes)

    def close(self) -> None:
        self.stream.stop_stream()
        self.stream.close()
