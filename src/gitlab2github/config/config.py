"""Configuration management for the GitLab to GitHub migration tool."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, validator

DEFAULT_CONFIG_PATHS = ['config.yaml', 'config.yml', '.gitlab2github.yaml']


def _validate_http_url(v: str) -> str:
    if not v.startswith(('http://', 'https://')):
        raise ValueError('URL must start with http:// or https://')
    return v.rstrip('/')


class GitLabConfig(BaseModel):
    """Configuration for the source GitLab instance."""

    url: str = Field(default='https://gitlab.com', description='GitLab instance URL')
    token: Optional[str] = Field(default=None, description='Personal access token')
    username: Optional[str] = Field(
        default=None, description='Username GitHub uses to clone during import'
    )
    password: Optional[str] = Field(
        default=None, description='Password GitHub uses to clone during import'
    )
    api_version: str = Field(default='v4', description='GitLab API version')
    membership_only: bool = Field(
        default=True, description='Only list projects the token is a member of'
    )
    timeout: int = Field(default=30, description='Request timeout in seconds')
    rate_limit_per_second: float = Field(
        default=10.0, description='API requests per second limit'
    )

    @validator('url')
    def validate_url(cls, v):
        """Validate GitLab URL format."""
        return _validate_http_url(v)

    @validator('rate_limit_per_second')
    def validate_rate_limit(cls, v):
        """Validate rate limit is positive."""
        if v <= 0:
            raise ValueError('Rate limit must be positive')
        return v


class GitHubConfig(BaseModel):
    """Configuration for the target GitHub organization."""

    url: str = Field(default='https://api.github.com', description='GitHub API URL')
    token: Optional[str] = Field(default=None, description='Personal access token')
    organization: str = Field(..., description='Organization owning the repositories')
    timeout: int = Field(default=30, description='Request timeout in seconds')
    rate_limit_per_second: float = Field(
        default=5.0, description='API requests per second limit'
    )

    @validator('url')
    def validate_url(cls, v):
        """Validate GitHub API URL format."""
        return _validate_http_url(v)

    @validator('organization')
    def validate_organization(cls, v):
        if not v or '/' in v:
            raise ValueError('Organization must be a plain login name')
        return v

    @validator('rate_limit_per_second')
    def validate_rate_limit(cls, v):
        """Validate rate limit is positive."""
        if v <= 0:
            raise ValueError('Rate limit must be positive')
        return v


class MigrationConfig(BaseModel):
    """Migration-specific configuration."""

    write_delay: float = Field(
        default=1.0, description='Pause in seconds before each issue/comment write'
    )
    import_poll_interval: float = Field(
        default=2.0, description='Seconds between import status checks'
    )
    import_timeout: Optional[float] = Field(
        default=3600.0,
        description='Give up on an import after this many seconds (null: never)',
    )
    max_concurrent_repositories: int = Field(
        default=3, description='Repositories processed at once by batch commands'
    )
    default_assignee: Optional[str] = Field(
        default=None, description='GitHub login for unmapped GitLab assignees'
    )

    @validator('write_delay')
    def validate_write_delay(cls, v):
        if v < 0:
            raise ValueError('Write delay cannot be negative')
        return v

    @validator('import_poll_interval')
    def validate_poll_interval(cls, v):
        if v <= 0:
            raise ValueError('Import poll interval must be positive')
        return v

    @validator('import_timeout')
    def validate_import_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError('Import timeout must be positive')
        return v

    @validator('max_concurrent_repositories')
    def validate_max_concurrent(cls, v):
        if v <= 0:
            raise ValueError('Max concurrent repositories must be positive')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default='INFO', description='Log level')
    file: Optional[str] = Field(default=None, description='Log file path')
    format: Optional[str] = Field(default=None, description='Log format')

    @validator('level')
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return v.upper()


class Config(BaseModel):
    """Main configuration class."""

    gitlab: GitLabConfig = Field(..., description='Source GitLab instance')
    github: GitHubConfig = Field(..., description='Target GitHub organization')
    migration: MigrationConfig = Field(
        default_factory=MigrationConfig, description='Migration settings'
    )
    users: Dict[str, str] = Field(
        default_factory=dict, description='GitLab username to GitHub login'
    )
    repositories: List[str] = Field(
        default_factory=list, description='Known repository names'
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description='Logging settings'
    )

    class Config:
        """Pydantic configuration."""

        extra = 'forbid'

    @classmethod
    def from_file(cls, config_path: str) -> 'Config':
        """Load configuration from YAML file."""
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(f'Configuration file not found: {config_path}')

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables."""
        load_dotenv()

        config_data = {
            'gitlab': {
                'url': os.getenv('GITLAB_URL'),
                'token': os.getenv('GITLAB_TOKEN'),
                'username': os.getenv('GITLAB_USERNAME'),
                'password': os.getenv('GITLAB_PASSWORD'),
                'membership_only': os.getenv('GITLAB_MEMBERSHIP_ONLY'),
            },
            'github': {
                'url': os.getenv('GITHUB_API_URL'),
                'token': os.getenv('GITHUB_TOKEN'),
                'organization': os.getenv('GITHUB_ORG'),
            },
            'migration': {
                'write_delay': os.getenv('MIGRATION_WRITE_DELAY'),
                'import_poll_interval': os.getenv('MIGRATION_IMPORT_POLL_INTERVAL'),
                'import_timeout': os.getenv('MIGRATION_IMPORT_TIMEOUT'),
                'max_concurrent_repositories': os.getenv('MIGRATION_MAX_CONCURRENT'),
                'default_assignee': os.getenv('MIGRATION_DEFAULT_ASSIGNEE'),
            },
            'logging': {
                'level': os.getenv('LOG_LEVEL', 'INFO'),
                'file': os.getenv('LOG_FILE'),
            },
        }

        return cls(**cls._remove_none_values(config_data))

    @classmethod
    def discover(cls, config_path: Optional[str] = None) -> 'Config':
        """Load configuration from a path, a default location or the environment."""
        if config_path:
            return cls.from_file(config_path)

        for path in DEFAULT_CONFIG_PATHS:
            if Path(path).exists():
                return cls.from_file(path)

        try:
            return cls.from_env()
        except ValueError as e:
            raise FileNotFoundError(
                'No configuration found. Use --config to specify a file or run '
                '"gitlab2github init" to create one.'
            ) from e

    @staticmethod
    def _remove_none_values(data: Any) -> Any:
        """Recursively remove None values from dictionary."""
        if isinstance(data, dict):
            return {
                k: Config._remove_none_values(v)
                for k, v in data.items()
                if v is not None
            }
        return data

    def to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        config_file = Path(config_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(
                self.dict(), f, default_flow_style=False, indent=2, sort_keys=False
            )

    @staticmethod
    def create_template(output_path: str) -> None:
        """Create a configuration template file."""
        template_config = {
            'gitlab': {
                'url': 'https://gitlab.com',
                'token': 'your-gitlab-personal-access-token',
                'username': 'gitlab-user',
                'password': 'gitlab-password-or-token',
                'api_version': 'v4',
                'membership_only': True,
                'timeout': 30,
            },
            'github': {
                'url': 'https://api.github.com',
                'token': 'your-github-personal-access-token',
                'organization': 'your-organization',
                'timeout': 30,
            },
            'migration': {
                'write_delay': 1.0,
                'import_poll_interval': 2.0,
                'import_timeout': 3600,
                'max_concurrent_repositories': 3,
                'default_assignee': None,
            },
            'users': {'gitlab-user': 'github-user'},
            'repositories': [],
            'logging': {
                'level': 'INFO',
                'file': 'migration.log',
            },
        }

        config_file = Path(output_path)
        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, 'w', encoding='utf-8') as f:
            yaml.safe_dump(
                template_config, f, default_flow_style=False, indent=2, sort_keys=False
            )
