import logging
import multiprocessing
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, TypedDict, cast

import yaml

logger: logging.Logger = logging.getLogger(__name__)


class RawAppConfig(TypedDict):
    max_workers: int
    max_inflight: int
    retry_max_attempts: int
    retry_min_delay: int
    retry_max_delay: int
    retry_time_unit: float


class RawConfigFile(TypedDict):
    config: RawAppConfig


CONFIG_FILENAME: Path = Path("diskusage.yaml")

DATABASE_URL_ENV: str = "DATABASE_URL"
LOG_FREQUENCY_ENV: str = "DISK_USAGE_LOG_FREQUENCY"
DEFAULT_LOG_FREQUENCY: int = 300


class ConfigError(Exception):
    """A required setting is missing or unusable."""


def type_error(value: object) -> NoReturn:
    raise TypeError(f"Unexpected value of wrong type: {value!r}")


def database_path(url: str) -> Path:
    """
    Turn a ``sqlite:///`` URL, or a bare path, into the database file path.
    """
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            url = url[len(prefix) :]
            break

    if not url:
        raise ConfigError(f"{DATABASE_URL_ENV} does not name a database file.")

    return Path(url)


def parse_log_frequency(value: str | None) -> int:
    if value is None:
        return DEFAULT_LOG_FREQUENCY

    try:
        frequency: int = int(value)
    except ValueError:
        logger.warning("Ignoring %s=%r, using %s seconds", LOG_FREQUENCY_ENV, value, DEFAULT_LOG_FREQUENCY)
        return DEFAULT_LOG_FREQUENCY

    if frequency <= 0:
        logger.warning("Ignoring %s=%r, using %s seconds", LOG_FREQUENCY_ENV, value, DEFAULT_LOG_FREQUENCY)
        return DEFAULT_LOG_FREQUENCY

    logger.info("Found log frequency from environment: %s seconds", frequency)
    return frequency


@dataclass(slots=True)
class AppConfig:
    db_path: Path
    log_frequency: int = DEFAULT_LOG_FREQUENCY
    max_workers: int = multiprocessing.cpu_count()
    max_inflight: int = 200
    retry_max_attempts: int = 120
    retry_min_delay: int = 1
    retry_max_delay: int = 5
    retry_time_unit: float = 1.0

    @staticmethod
    def load(path: Path = CONFIG_FILENAME, environ: Mapping[str, str] | None = None) -> "AppConfig":
        env: Mapping[str, str] = os.environ if environ is None else environ

        database_url: str | None = env.get(DATABASE_URL_ENV)
        if not database_url:
            raise ConfigError(f"{DATABASE_URL_ENV} environment variable not set.")

        appConfig: AppConfig = AppConfig(
            db_path=database_path(database_url),
            log_frequency=parse_log_frequency(env.get(LOG_FREQUENCY_ENV)),
        )

        if path.exists():
            appConfig.apply_raw(load_raw(path))

        return appConfig

    def apply_raw(self, raw: Mapping[str, object]) -> None:
        for key in RawAppConfig.__annotations__:
            if key not in raw:
                continue
            value: object = raw[key]
            if key == "retry_time_unit":
                if not isinstance(value, (int, float)) or isinstance(value, bool):
                    type_error(value)
                setattr(self, key, float(value))
            else:
                if not isinstance(value, int) or isinstance(value, bool):
                    type_error(value)
                setattr(self, key, value)

        if self.retry_min_delay > self.retry_max_delay:
            raise ValueError("retry_min_delay must not exceed retry_max_delay.")

    def save(self, path: Path = CONFIG_FILENAME) -> None:
        raw: RawConfigFile = {"config": self.to_raw()}
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(raw, f, sort_keys=False)

    def to_raw(self) -> RawAppConfig:
        return {
            "max_workers": self.max_workers,
            "max_inflight": self.max_inflight,
            "retry_max_attempts": self.retry_max_attempts,
            "retry_min_delay": self.retry_min_delay,
            "retry_max_delay": self.retry_max_delay,
            "retry_time_unit": self.retry_time_unit,
        }


def load_raw(path: Path) -> dict[str, object]:
    with path.open("r", encoding="UTF-8") as f:
        raw_loaded_obj: object | None = cast(object, yaml.safe_load(f))

    if not raw_loaded_obj:
        raise ValueError("Config file is empty or invalid YAML.")

    if not isinstance(raw_loaded_obj, dict):
        type_error(raw_loaded_obj)

    raw_dict: dict[str, object] = cast(dict[str, object], raw_loaded_obj)

    cfg_raw: object | None = raw_dict.get("config")
    if not isinstance(cfg_raw, dict):
        type_error(cfg_raw)

    return cast(dict[str, object], cfg_raw)
