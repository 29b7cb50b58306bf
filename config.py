import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _get_env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip() in {"1", "true", "True", "yes", "YES", "y"}


def _get_env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc


def _get_env_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None or val == "":
        return default
    try:
        return float(val)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be a float") from exc


@dataclass
class Config:
    alarms_path: Path
    alarm_sound_path: Path
    tick_interval_ms: int
    dedup_clear_interval_s: float
    seed_default_alarms: bool
    empty_days_one_shot: bool
    timezone: Optional[str]
    output_device_index: Optional[int]
    debug: bool
    log_level: str
    log_dir: Path


def load_config(env_path: Optional[Path] = None) -> Config:
    if env_path is None:
        env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    tick_interval_ms = _get_env_int("TICK_INTERVAL_MS", 1000)
    if tick_interval_ms <= 0:
        raise ValueError("TICK_INTERVAL_MS must be positive")
    dedup_clear_interval_s = _get_env_float("DEDUP_CLEAR_INTERVAL_S", 60.0)
    if dedup_clear_interval_s <= 0:
        raise ValueError("DEDUP_CLEAR_INTERVAL_S must be positive")

    output_device_env = os.getenv("OUTPUT_DEVICE_INDEX")
    output_device_index = _get_env_int("OUTPUT_DEVICE_INDEX", 0) if output_device_env else None
    debug = _get_env_bool("DEBUG", False)
    log_level = os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO").upper()

    return Config(
        alarms_path=Path(os.getenv("ALARM_STORAGE_PATH", "data/alarms.json")),
        alarm_sound_path=Path(os.getenv("ALARM_SOUND_PATH", "data/alarm.wav")),
        tick_interval_ms=tick_interval_ms,
        dedup_clear_interval_s=dedup_clear_interval_s,
        seed_default_alarms=_get_env_bool("SEED_DEFAULT_ALARMS", True),
        empty_days_one_shot=_get_env_bool("EMPTY_DAYS_ONE_SHOT", False),
        timezone=os.getenv("TIMEZONE") or None,
        output_device_index=output_device_index,
        debug=debug,
        log_level=log_level,
        log_dir=Path(os.getenv("LOG_DIR", "logs")),
    )


def setup_logging(log_level: str = "INFO", logs_dir: Path = Path("logs")) -> None:
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_path = logs_dir / "chime.log"
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=[file_handler, console_handler],
    )
