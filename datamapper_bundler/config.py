"""Configuration settings for datamapper_bundler.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the DM_BUNDLER_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="DM_BUNDLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    working_dir: Path | None = Field(
        default=None,
        description="Directory holding generated configs, caches and staging "
        "(uses the current directory if not set)",
    )
    resources_dir: Path = Field(
        default=Path("src/main/wso2mi/resources"),
        description="Project resource root",
    )
    data_mapper_dir: str = Field(
        default="registry/gov/datamapper",
        description="Data mapper root, relative to the resource root",
    )
    staging_dir_name: str = Field(
        default="data-mapper-artifacts",
        min_length=1,
        description="Name of the shared staging directory",
    )

    # Toolchain
    pom_file: str = Field(
        default="pom.xml",
        description="Build descriptor passed to Maven",
    )
    maven_command: str = Field(
        default="mvn",
        description="Command used to probe the Maven installation",
    )

    # Operational modes
    fail_fast: bool = Field(
        default=True,
        description="Abort the run on the first module build failure",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    def resolve_working_dir(self) -> Path:
        """Return the effective working directory."""
        return self.working_dir if self.working_dir is not None else Path.cwd()

    def module_root(self) -> Path:
        """Return the directory whose subdirectories are data mapper modules."""
        return self.resources_dir / self.data_mapper_dir


def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
