"""
Unit tests for settings loading.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from fda_importer.config import Settings, load_settings, settings_from_env


SETTING_VARS = [
    "FDA_API_BASE_URL",
    "FDA_API_KEY",
    "FDA_API_TIMEOUT",
    "FDA_FETCH_BATCH_SIZE",
    "PMA_MAX_RECORDS",
    "K510_MAX_RECORDS",
    "K510_WINDOW_DAYS",
    "EXPORT_PATH",
    "EXPORT_DIR",
    "HOST",
    "PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every setting; monkeypatch restores them afterwards"""
    for name in SETTING_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.mark.unit
def test_defaults(clean_env):
    settings = settings_from_env()

    assert settings.api.base_url == "https://api.fda.gov/device/"
    assert settings.api.api_key is None
    assert settings.api.batch_size == 100
    assert settings.pipeline.pma_max_records == 50
    assert settings.pipeline.k510_max_records == 5000
    assert settings.pipeline.k510_window_days == 90
    assert settings.pipeline.export_path == Path("fda_device_export.csv")
    assert settings.server.port == 3000


@pytest.mark.unit
def test_environment_overrides(clean_env):
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("PMA_MAX_RECORDS", "10")
    clean_env.setenv("FDA_API_KEY", "abc123")
    clean_env.setenv("EXPORT_PATH", "/tmp/devices.csv")

    settings = settings_from_env()

    assert settings.server.port == 8080
    assert settings.pipeline.pma_max_records == 10
    assert settings.api.api_key == "abc123"
    assert settings.pipeline.export_path == Path("/tmp/devices.csv")


@pytest.mark.unit
def test_invalid_port_rejected(clean_env):
    clean_env.setenv("PORT", "not-a-port")
    with pytest.raises(ValidationError):
        settings_from_env()


@pytest.mark.unit
def test_load_settings_reads_env_file(clean_env, tmp_path):
    env_file = tmp_path / "test.env"
    env_file.write_text("PORT=4000\nK510_WINDOW_DAYS=30\n")

    settings = load_settings(env_file)

    assert settings.server.port == 4000
    assert settings.pipeline.k510_window_days == 30


@pytest.mark.unit
def test_environment_wins_over_env_file(clean_env, tmp_path):
    env_file = tmp_path / "test.env"
    env_file.write_text("PORT=4000\n")
    clean_env.setenv("PORT", "5000")

    assert load_settings(env_file).server.port == 5000


@pytest.mark.unit
def test_settings_model_defaults():
    assert Settings().pipeline.export_dir == Path("exports")
