"""Configuration management for mvlite projects."""

import os
from pathlib import Path
from typing import Optional, Dict, Any, Literal
import toml
from pydantic import BaseModel, Field, ConfigDict

from mvlite.core.connection import DEFAULT_PRAGMAS, MEMORY_PATH
from mvlite.managers.registry import DEFAULT_REGISTRY_TABLE


class ProjectConfig(BaseModel):
    """Configuration for an mvlite project stored in .mvlite/config.toml."""

    model_config = ConfigDict(
        extra="allow"
    )  # Allow additional fields for extensibility

    database_path: str = Field(
        default="mvlite.db",
        description="SQLite database file, relative to the project directory",
    )
    registry_table: str = Field(
        default=DEFAULT_REGISTRY_TABLE, description="Table holding view definitions"
    )
    on_schema_drift: Literal["recreate", "reject"] = Field(
        default="recreate",
        description="What to do when a view's query no longer matches its table",
    )
    busy_timeout: float = Field(
        default=30.0, description="Seconds to wait on a locked database"
    )
    pragmas: Dict[str, Any] = Field(
        default_factory=lambda: dict(DEFAULT_PRAGMAS),
        description="PRAGMA settings applied to every connection",
    )


class Config:
    """Manages mvlite project configuration."""

    def __init__(self, project_dir: Optional[Path] = None):
        """Initialize config manager.

        Args:
            project_dir: Path to project directory. If None, uses MVLITE_PROJECT_DIR env var or current directory.
        """
        # Check environment variable first
        if project_dir is None:
            env_dir = os.environ.get("MVLITE_PROJECT_DIR")
            if env_dir:
                project_dir = Path(env_dir)

        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.config_dir = self.project_dir / ".mvlite"
        self.config_path = self.config_dir / "config.toml"
        self._config: Optional[ProjectConfig] = None

    @property
    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()

    def load(self) -> ProjectConfig:
        """Load configuration from disk, with environment variable overrides."""
        if not self.exists:
            raise FileNotFoundError(f"Config file not found at {self.config_path}")

        with open(self.config_path, "r") as f:
            data = toml.load(f)

        self._apply_env_overrides(data)

        self._config = ProjectConfig(**data)
        return self._config

    def _apply_env_overrides(self, data: Dict[str, Any]) -> None:
        """Apply environment variable overrides to configuration data."""
        if env_db := os.environ.get("MVLITE_DATABASE"):
            data["database_path"] = env_db

        if env_drift := os.environ.get("MVLITE_SCHEMA_DRIFT"):
            data["on_schema_drift"] = env_drift

    def save(self, config: Optional[ProjectConfig] = None) -> None:
        """Save configuration to disk.

        Args:
            config: Configuration to save. If None, saves current config.
        """
        if config:
            self._config = config

        if not self._config:
            raise ValueError("No configuration to save")

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, "w") as f:
            toml.dump(self._config.model_dump(), f)

    def init_project(self) -> ProjectConfig:
        """Initialize a new mvlite project with default configuration.

        Raises:
            FileExistsError: If the project is already initialized
        """
        if self.exists:
            raise FileExistsError(f"Project already initialized at {self.project_dir}")

        config = ProjectConfig()
        self.save(config)
        return config

    def database_file(self, config: Optional[ProjectConfig] = None) -> str:
        """Resolve the configured database path against the project directory."""
        config = config or self._config or self.load()
        if config.database_path == MEMORY_PATH:
            return MEMORY_PATH
        path = Path(config.database_path)
        if not path.is_absolute():
            path = self.project_dir / path
        return str(path)
