"""Repository models shared by GitLab projects and GitHub repositories."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RepositorySystem(str, Enum):
    """System a repository lives on."""

    GITLAB = 'gitlab'
    GITHUB = 'github'


class RemoteRepository(BaseModel):
    """A GitLab project or a GitHub repository.

    Repositories are matched across systems by ``name`` only; ``id`` is local
    to the system that issued it.
    """

    id: int = Field(..., description='Repository ID on its own system')
    name: str = Field(..., description='Repository name')
    description: Optional[str] = Field(default=None, description='Description')
    clone_url: Optional[str] = Field(default=None, description='HTTP clone URL')
    web_url: Optional[str] = Field(default=None, description='Web URL')
    system: RepositorySystem = Field(..., description='Owning system')

    @classmethod
    def from_gitlab(cls, data: Dict[str, Any]) -> 'RemoteRepository':
        return cls(
            id=data['id'],
            name=data['name'],
            description=data.get('description'),
            clone_url=data.get('http_url_to_repo'),
            web_url=data.get('web_url'),
            system=RepositorySystem.GITLAB,
        )

    @classmethod
    def from_github(cls, data: Dict[str, Any]) -> 'RemoteRepository':
        return cls(
            id=data['id'],
            name=data['name'],
            description=data.get('description'),
            clone_url=data.get('clone_url'),
            web_url=data.get('html_url'),
            system=RepositorySystem.GITHUB,
        )


class ImportState(str, Enum):
    """Steps of a repository import."""

    START = 'start'
    VERIFY_SOURCE_EXISTS = 'verify_source_exists'
    VERIFY_TARGET_ABSENT = 'verify_target_absent'
    CREATE_TARGET = 'create_target'
    TRIGGER_IMPORT = 'trigger_import'
    POLL_IMPORT = 'poll_import'
    COMPLETE = 'complete'
    FAILED = 'failed'


class ImportResult(BaseModel):
    """Outcome of a completed repository import."""

    repository: str = Field(..., description='Repository name')
    state: ImportState = Field(..., description='Final state')
    transitions: List[ImportState] = Field(
        default_factory=list, description='States visited, in order'
    )
    status_text: Optional[str] = Field(
        default=None, description='Last status text reported by GitHub'
    )
    polls: int = Field(default=0, description='Number of status checks made')
    github_repository: Optional[RemoteRepository] = Field(
        default=None, description='The created GitHub repository'
    )
