"""
Runtime configuration for the importer.

Settings come from environment variables, optionally loaded from a .env file
with python-dotenv. Database connection settings are read by
DatabaseConnectionPool itself (DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD).
"""
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field


DEFAULT_API_BASE_URL = "https://api.fda.gov/device/"
DEFAULT_EXPORT_PATH = "fda_device_export.csv"


class ApiSettings(BaseModel):
    """
    openFDA device API settings.

    Attributes:
        base_url: Base URL that endpoint files are appended to
        api_key: Optional openFDA API key (raises the daily request quota)
        timeout: Per-request timeout in seconds
        batch_size: Records requested per page
    """

    base_url: str = DEFAULT_API_BASE_URL
    api_key: str | None = None
    timeout: float = Field(30.0, gt=0)
    batch_size: int = Field(100, ge=1, le=1000)


class PipelineSettings(BaseModel):
    """
    Import run settings.

    Attributes:
        pma_max_records: Cap for the unbounded PMA fetch
        k510_max_records: Cap for the windowed 510(k) fetch
        k510_window_days: Length of the trailing 510(k) decision window
        export_path: CSV destination of the run-once import
        export_dir: Directory for timestamped HTTP exports
    """

    pma_max_records: int = Field(50, ge=0)
    k510_max_records: int = Field(5000, ge=0)
    k510_window_days: int = Field(90, ge=0)
    export_path: Path = Path(DEFAULT_EXPORT_PATH)
    export_dir: Path = Path("exports")


class ServerSettings(BaseModel):
    """HTTP entry point settings."""

    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)


class Settings(BaseModel):
    """Complete importer configuration."""

    api: ApiSettings = Field(default_factory=ApiSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def settings_from_env() -> Settings:
    """
    Build settings from the current process environment.

    Returns:
        Settings with defaults for every unset variable

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value
    """
    return Settings(
        api=ApiSettings(
            base_url=_env("FDA_API_BASE_URL", DEFAULT_API_BASE_URL),
            api_key=_env("FDA_API_KEY"),
            timeout=_env("FDA_API_TIMEOUT", "30"),
            batch_size=_env("FDA_FETCH_BATCH_SIZE", "100"),
        ),
        pipeline=PipelineSettings(
            pma_max_records=_env("PMA_MAX_RECORDS", "50"),
            k510_max_records=_env("K510_MAX_RECORDS", "5000"),
            k510_window_days=_env("K510_WINDOW_DAYS", "90"),
            export_path=_env("EXPORT_PATH", DEFAULT_EXPORT_PATH),
            export_dir=_env("EXPORT_DIR", "exports"),
        ),
        server=ServerSettings(
            host=_env("HOST", "0.0.0.0"),
            port=_env("PORT", "3000"),
        ),
    )


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load a .env file (if present) and build settings from the environment.

    Variables already set in the environment win over the file.

    Args:
        env_file: Explicit .env path; defaults to ./.env lookup

    Returns:
        Settings instance
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(find_dotenv(usecwd=True), override=False)
    return settings_from_env()
