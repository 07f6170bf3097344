from pathlib import Path

import pytest
import yaml

from diskusage.config import DEFAULT_LOG_FREQUENCY, AppConfig, ConfigError, database_path, parse_log_frequency


def test_load_requires_database_url(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        AppConfig.load(tmp_path / "diskusage.yaml", environ={})


def test_load_from_environment(tmp_path: Path) -> None:
    cfg: AppConfig = AppConfig.load(
        tmp_path / "diskusage.yaml",
        environ={"DATABASE_URL": "sqlite:///var/usage.db", "DISK_USAGE_LOG_FREQUENCY": "60"},
    )

    assert cfg.db_path == Path("var/usage.db")
    assert cfg.log_frequency == 60
    assert cfg.retry_max_attempts == 120


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("sqlite:////tmp/usage.db", Path("/tmp/usage.db")),
        ("/tmp/usage.db", Path("/tmp/usage.db")),
        ("usage.db", Path("usage.db")),
    ],
)
def test_database_path(url: str, expected: Path) -> None:
    assert database_path(url) == expected


def test_database_path_must_name_a_file() -> None:
    with pytest.raises(ConfigError):
        database_path("sqlite:///")


@pytest.mark.parametrize("value", [None, "soon", "0", "-5"])
def test_log_frequency_falls_back_to_default(value: str | None) -> None:
    assert parse_log_frequency(value) == DEFAULT_LOG_FREQUENCY


def test_yaml_overrides_tuning(tmp_path: Path) -> None:
    path: Path = tmp_path / "diskusage.yaml"
    path.write_text(yaml.safe_dump({"config": {"max_workers": 3, "retry_time_unit": 0.5}}), encoding="utf-8")

    cfg: AppConfig = AppConfig.load(path, environ={"DATABASE_URL": "usage.db"})

    assert cfg.max_workers == 3
    assert cfg.retry_time_unit == 0.5
    assert cfg.max_inflight == 200


def test_yaml_with_wrong_type_is_rejected(tmp_path: Path) -> None:
    path: Path = tmp_path / "diskusage.yaml"
    path.write_text(yaml.safe_dump({"config": {"max_workers": "many"}}), encoding="utf-8")

    with pytest.raises(TypeError):
        AppConfig.load(path, environ={"DATABASE_URL": "usage.db"})


def test_empty_yaml_is_rejected(tmp_path: Path) -> None:
    path: Path = tmp_path / "diskusage.yaml"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ValueError):
        AppConfig.load(path, environ={"DATABASE_URL": "usage.db"})


def test_save_then_load(tmp_path: Path) -> None:
    path: Path = tmp_path / "diskusage.yaml"
    cfg: AppConfig = AppConfig(db_path=Path("usage.db"), max_workers=2, retry_max_attempts=0)
    cfg.save(path)

    loaded: AppConfig = AppConfig.load(path, environ={"DATABASE_URL": "usage.db"})

    assert loaded.to_raw() == cfg.to_raw()
