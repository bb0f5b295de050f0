"""
Application configuration management.
"""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8084

    # Workflow configuration file, read from the target repository's default branch
    workflow_config_path: str = "workflow-tasks.toml"

    # Bitbucket REST calls
    http_timeout_seconds: float = 30.0
    verify_ssl: bool = True
    task_api: Literal["comment", "legacy"] = "comment"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
