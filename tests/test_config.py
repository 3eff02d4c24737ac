"""
Tests for configuration loading.
"""

from pathlib import Path

import pytest

from serviceconnect.config import AppConfig, SchedulingConfig
from serviceconnect.domain.models import BookingStatus


def test_defaults():
    config = AppConfig()
    
    assert config.timezone == "Africa/Nairobi"
    assert config.data_file is None
    assert config.scheduling.slot_interval_minutes == 30
    assert config.scheduling.blocking_set() == frozenset(
        {BookingStatus.PENDING, BookingStatus.CONFIRMED}
    )
    assert config.logging.level == "WARNING"


def test_load_from_yaml(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "timezone: Europe/Berlin\n"
        "data_file: data/marketplace.json\n"
        "scheduling:\n"
        "  slot_interval_minutes: 15\n"
        "  blocking_statuses: [pending, confirmed, pending]\n"
        "api:\n"
        "  base_url: https://example.com/api/\n"
        "logging:\n"
        "  level: debug\n",
        encoding="utf-8",
    )
    
    config = AppConfig.load_from_yaml(config_path)
    
    assert config.timezone == "Europe/Berlin"
    assert config.data_file == (tmp_path / "data" / "marketplace.json").resolve()
    assert config.scheduling.slot_interval_minutes == 15
    assert config.scheduling.blocking_statuses == [BookingStatus.PENDING, BookingStatus.CONFIRMED]
    assert config.api.base_url == "https://example.com/api"
    assert config.logging.level == "DEBUG"


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load(tmp_path / "missing.yaml")


def test_load_without_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "serviceconnect.config.get_default_config_path",
        lambda: Path(tmp_path) / "config.yaml",
    )
    
    assert AppConfig.load() == AppConfig()


def test_invalid_yaml_raises(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("scheduling: [unclosed\n", encoding="utf-8")
    
    with pytest.raises(ValueError, match="Invalid YAML"):
        AppConfig.load_from_yaml(config_path)


def test_root_must_be_mapping(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("- just\n- a list\n", encoding="utf-8")
    
    with pytest.raises(ValueError, match="mapping"):
        AppConfig.load_from_yaml(config_path)


@pytest.mark.parametrize(
    "values",
    [
        {"slot_interval_minutes": 0},
        {"blocking_statuses": []},
        {"blocking_statuses": ["CANCELLED"]},
        {"blocking_statuses": ["ARCHIVED"]},
    ],
)
def test_invalid_scheduling(values):
    with pytest.raises(ValueError):
        SchedulingConfig(**values)
