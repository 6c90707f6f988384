"""ABOUTME: Configuration logic and path settings for the project.
ABOUTME: Provides slug defaults plus paths for configs and the SQLite database."""

from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sluggable import __version__


def _get_project_root() -> Path:
    """Find project root by looking for pyproject.toml."""
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    return Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Contains settings for this project.

    Every field can be overridden through a ``SLUGGABLE_``-prefixed environment variable.
    """

    model_config = SettingsConfigDict(env_prefix="SLUGGABLE_")

    VERSION: str = __version__
    """Project version."""

    PROJECT_ROOT: Path = _get_project_root()
    """Root directory of the project."""

    DEFAULT_MAXIMUM_LENGTH: int = 250
    """Source string length cap used when options do not set one."""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def configs_dir(self) -> Path:
        """Directory containing configuration files."""
        return self.PROJECT_ROOT / "configs"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def logging_config_path(self) -> Path:
        """Path to the logging.yml dictConfig file."""
        return self.configs_dir / "logging.yml"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def slug_config_path(self) -> Path:
        """Path to the sluggable.yml per-record-type options file."""
        return self.configs_dir / "sluggable.yml"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def data_dir(self) -> Path:
        """Base data directory."""
        return self.PROJECT_ROOT / "data"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def db_path(self) -> Path:
        """Path to the SQLite database file."""
        return self.data_dir / "db" / "records.sqlite"


settings = Settings()
