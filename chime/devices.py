from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass
class OutputDeviceInfo:
    index: int
    name: str
    rate: int
    channels: int


def list_output_devices(pa) -> List[OutputDeviceInfo]:
    """Output-capable devices of a ``pyaudio.PyAudio`` instance."""

    devices = []
    for i in range(pa.get_device_count()):
        info = pa.get_device_info_by_index(i)
        if info.get("maxOutputChannels", 0) > 0:
            devices.append(
                OutputDeviceInfo(
                    index=i,
                    name=info.get("name", "unknown"),
                    rate=int(info.get("defaultSampleRate", 24000)),
                    channels=int(info.get("maxOutputChannels", 1)),
                )
            )
    return devices


def format_device(device: OutputDeviceInfo) -> str:
    return f"[OUT] Index {device.index}: {device.name} | rate={device.rate} | channels={device.channels}"
