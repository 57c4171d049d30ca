import json
import logging
import os
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("BLACKMATE_CONFIG", "config.json")


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, ge=1, le=65535, description="Bind port")
    public_base_url: Optional[str] = Field(default=None, description="Base URL used in returned download links")


class DownloadConfig(BaseModel):
    max_concurrent: int = Field(default=1, ge=1, le=100, description="Max concurrent yt-dlp downloads")
    socket_timeout: int = Field(default=10, ge=1, description="Socket timeout for yt-dlp")
    retries: int = Field(default=3, ge=0, description="Number of retries for yt-dlp")
    info_timeout_seconds: Optional[float] = Field(default=None, gt=0, description="Info query timeout, none by default")
    allowed_url_markers: List[str] = Field(
        default=["youtube.com/", "youtu.be/"],
        description="Substrings that mark a supported video URL"
    )


class StorageConfig(BaseModel):
    output_dir: str = Field(default="~/BlackMate", description="Directory for produced media files")

    @property
    def path(self) -> str:
        return os.path.abspath(os.path.expanduser(self.output_dir))


class CleanupConfig(BaseModel):
    retention_seconds: int = Field(default=300, ge=1, description="Lifetime of a produced file")
    sweep_interval_seconds: int = Field(default=60, ge=0, description="Periodic sweep interval, 0 disables")


class YtDlpConfig(BaseModel):
    binary: str = Field(default="yt-dlp", description="yt-dlp executable")
    js_runtime: Optional[str] = Field(default=None, description="JS runtime (e.g., deno:/usr/local/bin/deno)")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class ApiConfig(BaseModel):
    title: str = Field(default="BlackMate API", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")


class Config(BaseSettings):
    """Main configuration model"""
    model_config = SettingsConfigDict(env_prefix="BLACKMATE_", env_nested_delimiter="__")

    server: ServerConfig = Field(default_factory=ServerConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    cleanup: CleanupConfig = Field(default_factory=CleanupConfig)
    ytdlp: YtDlpConfig = Field(default_factory=YtDlpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def load_from_file(cls, config_path: str) -> "Config":
        """Load configuration from JSON file, falling back to env and defaults"""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
            loaded = cls(**config_data)
            logger.info(f"Configuration loaded from {config_path}")
            return loaded
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {config_path}: {str(e)}")
            logger.info("Using environment/default configuration")
            return cls()


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration with priority: config.json > env vars > defaults"""
    config_path = config_path or CONFIG_PATH

    if os.path.exists(config_path):
        return Config.load_from_file(config_path)

    logger.info(f"Config file not found at {config_path}, checking environment variables")
    return Config()


config = load_config()
