"""Configuration models."""

from .config import (
    Config,
    GitHubConfig,
    GitLabConfig,
    LoggingConfig,
    MigrationConfig,
)

__all__ = [
    'Config',
    'GitHubConfig',
    'GitLabConfig',
    'LoggingConfig',
    'MigrationConfig',
]
