"""
Configuration for epp-repo-ids.

Settings come from the environment (pydantic-settings), prefixed with
EPP_REPO_IDS_. For example, EPP_REPO_IDS_FETCH_TIMEOUT=60 shortens the fetch
bound. The database lives in a per-user data directory under `data_home`,
which falls back to XDG_DATA_HOME and then ~/.local/share.
"""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .rules import DATA_SUBDIR, DATABASE_FILENAME, FETCH_TIMEOUT_SECONDS, SOURCE_URL


def _default_data_home() -> Path:
    return Path.home() / ".local" / "share"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EPP_REPO_IDS_",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )

    data_home: Path = Field(
        default_factory=_default_data_home,
        validation_alias=AliasChoices("EPP_REPO_IDS_DATA_HOME", "XDG_DATA_HOME"),
        description="Base directory for per-user data",
    )
    source_url: str = Field(default=SOURCE_URL, description="Registry CSV location")
    fetch_timeout: float = Field(
        default=FETCH_TIMEOUT_SECONDS, gt=0, description="Whole-transfer bound in seconds"
    )
    log_level: str = Field(default="INFO", description="Diagnostics level")

    @property
    def data_dir(self) -> Path:
        return self.data_home.expanduser() / DATA_SUBDIR

    @property
    def database_path(self) -> Path:
        return self.data_dir / DATABASE_FILENAME
