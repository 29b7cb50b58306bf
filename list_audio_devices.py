from audio_io import create_pyaudio
from chime.devices import format_device, list_output_devices


def main() -> None:
    pa = create_pyaudio()
    try:
        print("\n=== OUTPUT DEVICES (use the index as OUTPUT_DEVICE_INDEX) ===\n")
        for device in list_output_devices(pa):
            print(format_device(device))
    finally:
        pa.terminate()


if __name__ == "__main__":
    main()
