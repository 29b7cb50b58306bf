import logging
import signal

from audio_io import AudioPlayer, create_pyaudio
from chime.commands import HELP_TEXT, CommandRouter
from chime.formatting import describe_alarm
from chime.manager import AlarmClock
from chime.registry import AlarmRegistry
from chime.sounds import AlarmSoundPlayer
from chime.storage import JsonAlarmStorage
from chime.tones import PcmAudio
from config import Config, load_config, setup_logging
from time_utils import resolve_timezone, wall_clock

logger = logging.getLogger("chime")


def graceful_exit(signum, frame) -> None:  # pragma: no cover - signal handler
    logger.info("Shutting down (signal %s)", signum)
    raise KeyboardInterrupt()


class AlarmClockRuntime:
    def __init__(self, config: Config, pa):
        self.config = config
        self.pa = pa

        self.storage = JsonAlarmStorage(config.alarms_path, seed_defaults=config.seed_default_alarms)
        self.registry = AlarmRegistry.from_storage(self.storage)
        self.sound_player = AlarmSoundPlayer(config.alarm_sound_path, open_output=self._open_output)
        self.clock = AlarmClock(
            registry=self.registry,
            sound_player=self.sound_player,
            now_fn=wall_clock(resolve_timezone(config.timezone)),
            tick_interval=config.tick_interval_ms / 1000.0,
            clear_interval=config.dedup_clear_interval_s,
            on_alarm_triggered=self._on_alarm_triggered,
            one_shot_empty_days=config.empty_days_one_shot,
        )
        self.router = CommandRouter(self.clock)

    def start(self) -> None:
        self.clock.start()

    def shutdown(self) -> None:
        self.clock.shutdown()
        self.pa.terminate()

    def run_console(self) -> None:
        print(HELP_TEXT)
        while True:
            try:
                line = input("> ")
            except EOFError:
                return
            result = self.router.handle_text(line)
            if result is None:
                continue
            if result.action == "quit":
                return
            if result.response_text:
                print(result.response_text)

    def _open_output(self, audio: PcmAudio) -> AudioPlayer:
        return AudioPlayer(
            self.pa,
            rate=audio.rate,
            channels=audio.channels,
            sample_width=audio.sample_width,
            device_index=self.config.output_device_index,
        )

    def _on_alarm_triggered(self, alarm) -> None:
        print(f"\n*** ALARM {describe_alarm(alarm)} *** (type 'dismiss' to stop)")


def main() -> None:
    config = load_config()
    setup_logging(config.log_level, config.log_dir)
    signal.signal(signal.SIGINT, graceful_exit)
    logger.info("Starting alarm clock (storage=%s)", config.alarms_path)

    runtime = AlarmClockRuntime(config, create_pyaudio())
    runtime.start()
    try:
        runtime.run_console()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        runtime.shutdown()


if __name__ == "__main__":
    main()
