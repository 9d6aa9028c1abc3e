"""
Configuration management using pydantic-settings.
Loads from config.yaml, .env, and environment variables.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .metadata.models import ReadingDirection, TitleType

# Load .env file at module import
load_dotenv()


class KomgaSettings(BaseSettings):
    """Komga server settings."""

    model_config = SettingsConfigDict(
        env_prefix="KOMGA_",
        extra="ignore",
    )

    host: str = Field(default="http://localhost:25600", description="Komga server URL")
    api_key: str = Field(default="", description="Komga API key")
    library_id: str | None = Field(default=None, description="Default library ID")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    rate_limit_delay: float = Field(default=0.0, description="Delay between requests (0 = disabled)")

    # Security settings
    allow_insecure_http: bool = Field(
        default=False,
        description="Allow HTTP connections (only localhost is allowed by default)",
    )
    tls_ca_bundle: str | None = Field(
        default=None,
        description="Path to CA certificate bundle for self-signed certs",
    )
    insecure_tls: bool = Field(
        default=False,
        description="DANGEROUS: Disable SSL verification entirely (env var KOMGA_INSECURE_TLS only)",
    )


class MetadataSettings(BaseSettings):
    """Provider matching and aggregation settings."""

    model_config = SettingsConfigDict(
        env_prefix="METADATA_",
        extra="ignore",
    )

    aggregate: bool = Field(default=False, description="Merge metadata from all providers, not only the first match")
    max_workers: int = Field(default=4, ge=1, description="Parallel provider queries during aggregation")
    match_threshold: float = Field(default=90.0, ge=0, le=100, description="Minimum name similarity (0-100)")
    search_limit: int = Field(default=5, ge=1, description="Search results considered per match attempt")


class PostProcessingSettings(BaseSettings):
    """Adjustments applied to merged metadata before it is written."""

    model_config = SettingsConfigDict(
        env_prefix="POSTPROCESSING_",
        extra="ignore",
    )

    series_title: bool = Field(default=True, description="Update the series title")
    alternative_series_titles: bool = Field(default=False, description="Keep alternative series titles")
    title_type: TitleType | None = Field(default=None, description="Preferred title type for the series title")
    order_books: bool = Field(default=False, description="Number books from their file names")
    language_value: str | None = Field(default=None, description="Force series language (BCP 47)")
    reading_direction_value: ReadingDirection | None = Field(default=None, description="Force reading direction")


class LoggingSettings(BaseSettings):
    """Logging output settings."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        extra="ignore",
    )

    level: str = Field(default="info", description="Console log level")
    file_path: Path | None = Field(default=None, description="Optional log file")
    use_rich: bool = Field(default=True, description="Use Rich console output")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    komga: KomgaSettings = Field(default_factory=KomgaSettings)
    metadata: MetadataSettings = Field(default_factory=MetadataSettings)
    post_processing: PostProcessingSettings = Field(default_factory=PostProcessingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    debug: bool = Field(default=False)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        """Load settings from config.yaml and environment."""
        config_data: dict[str, Any] = {}

        if config_path is None:
            config_path = Path("config.yaml")

        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                yaml_content: Any = yaml.safe_load(f)
                yaml_config: dict[str, Any] = yaml_content or {}

            if "metadata" in yaml_config:
                config_data["metadata"] = MetadataSettings(**yaml_config["metadata"])
            if "post_processing" in yaml_config:
                config_data["post_processing"] = PostProcessingSettings(**yaml_config["post_processing"])
            if "logging" in yaml_config:
                config_data["logging"] = LoggingSettings(**yaml_config["logging"])
            if "komga" in yaml_config:
                komga_yaml = dict(yaml_config["komga"] or {})
                # Enforce insecure_tls as env-only: strip from YAML and warn
                if "insecure_tls" in komga_yaml:
                    logging.getLogger(__name__).warning(
                        "insecure_tls found in config.yaml - this setting is env-var only for safety. "
                        "Use KOMGA_INSECURE_TLS=1 environment variable instead. Ignoring YAML value."
                    )
                    del komga_yaml["insecure_tls"]
                config_data["komga"] = KomgaSettings(**komga_yaml)
            if "debug" in yaml_config:
                config_data["debug"] = yaml_config["debug"]

        if "komga" not in config_data:
            config_data["komga"] = KomgaSettings()

        return cls(**config_data)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Path | None = None) -> Settings:
    """Reload settings from config."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
