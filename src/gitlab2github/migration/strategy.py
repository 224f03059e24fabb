"""Shared context, result model and base class for migration components."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..api.client import GitHubClient, GitLabClient
from ..api.rate_limiter import WriteThrottle
from ..config.config import MigrationConfig
from ..models.user import UserMapping
from .directory import RepositoryDirectory


class MigrationStatus(str, Enum):
    """Migration status enumeration."""

    COMPLETED = 'completed'
    FAILED = 'failed'


class MigrationResult(BaseModel):
    """Result of one unit of work on one repository."""

    operation: str = Field(..., description='Operation performed (migrate, import)')
    repository: str = Field(..., description='Repository name')
    status: MigrationStatus = Field(..., description='Migration status')

    started_at: datetime = Field(..., description='Start time')
    completed_at: Optional[datetime] = Field(default=None, description='End time')

    success: bool = Field(..., description='The operation succeeded')
    error_message: Optional[str] = Field(
        default=None, description='Error message if failed'
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description='Counts and other details'
    )

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat() if v else None}


class MigrationContext(BaseModel):
    """Everything a migration component needs for one run."""

    gitlab_client: GitLabClient = Field(..., description='Source GitLab client')
    github_client: GitHubClient = Field(..., description='Target GitHub client')
    directory: RepositoryDirectory = Field(..., description='Repository cache')
    settings: MigrationConfig = Field(
        default_factory=MigrationConfig, description='Migration settings'
    )
    user_mapping: UserMapping = Field(
        default_factory=UserMapping, description='Assignee mapping'
    )
    throttle: WriteThrottle = Field(
        default_factory=WriteThrottle, description='Pause before GitHub writes'
    )
    gitlab_username: Optional[str] = Field(
        default=None, description='Username GitHub clones the source with'
    )
    gitlab_password: Optional[str] = Field(
        default=None, description='Password GitHub clones the source with'
    )

    class Config:
        """Pydantic configuration."""

        arbitrary_types_allowed = True


class MigrationStrategy:
    """Base class for the components that migrate one part of a repository."""

    def __init__(self, context: MigrationContext):
        """Initialize migration component.

        Args:
            context: Migration context with clients and settings
        """
        self.context = context
        self.logger = logger.bind(component=self.__class__.__name__)

    @property
    def gitlab(self) -> GitLabClient:
        return self.context.gitlab_client

    @property
    def github(self) -> GitHubClient:
        return self.context.github_client
