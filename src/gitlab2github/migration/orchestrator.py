"""Coordinates imports and migrations across repositories."""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from ..api.exceptions import APIError
from ..models.repository import ImportResult, RemoteRepository, RepositorySystem
from .exceptions import (
    MigrationError,
    SourceNotFoundError,
    UnknownRepositoryError,
)
from .importer import RepositoryImporter
from .issues import IssueReplicator, gitlab_assignee
from .labels import LabelSynchronizer
from .milestones import MilestoneTranslator
from .strategy import MigrationContext, MigrationResult, MigrationStatus


class MigrationSummary(BaseModel):
    """Summary of a batch operation."""

    operation: str = Field(..., description='Operation performed')
    total: int = Field(..., description='Repositories processed')
    successful: int = Field(..., description='Repositories that succeeded')
    failed: int = Field(..., description='Repositories that failed')

    started_at: datetime = Field(..., description='Batch start time')
    completed_at: Optional[datetime] = Field(
        default=None, description='Batch completion time'
    )

    results: List[MigrationResult] = Field(
        default_factory=list, description='Per-repository results'
    )

    class Config:
        """Pydantic configuration."""

        json_encoders = {datetime: lambda v: v.isoformat() if v else None}


class MigrationCoordinator:
    """Runs the migration components for one repository or for all of them.

    Single-repository operations raise on failure. Batch operations record
    each failure and carry on with the remaining repositories.
    """

    def __init__(
        self, context: MigrationContext, known_repositories: Optional[List[str]] = None
    ):
        """Initialize the coordinator.

        Args:
            context: Migration context with clients and settings
            known_repositories: Repository names batch operations are limited to
        """
        self.context = context
        self.known_repositories = list(known_repositories or [])
        self.logger = logger.bind(component='MigrationCoordinator')

    @property
    def directory(self):
        return self.context.directory

    def list_known(self) -> List[str]:
        """Return the configured repository names."""
        return list(self.known_repositories)

    async def list_projects(self) -> Dict[RepositorySystem, List[RemoteRepository]]:
        """Return the repositories known on both systems."""
        await self.directory.ensure_loaded()
        return {
            system: self.directory.repositories(system) for system in RepositorySystem
        }

    async def migrate_one(self, repo_name: str) -> MigrationResult:
        """Copy labels, milestones, issues and comments of one repository.

        The GitHub repository must already exist.

        Raises:
            UnknownRepositoryError: No GitHub repository has that name.
            SourceNotFoundError: No GitLab project has that name.
            MigrationError: A component failed.
        """
        started_at = datetime.now()
        await self.directory.ensure_loaded()

        github_repo = self.directory.find_by_name(RepositorySystem.GITHUB, repo_name)
        if github_repo is None:
            raise UnknownRepositoryError(
                'No GitHub repository with this name', repository=repo_name
            )

        gitlab_repo = self.directory.find_by_name(RepositorySystem.GITLAB, repo_name)
        if gitlab_repo is None:
            raise SourceNotFoundError(
                'No GitLab project with this name', repository=repo_name
            )

        self.logger.info(f'Migrating {repo_name}')

        labels = await LabelSynchronizer(self.context).sync(github_repo, gitlab_repo)
        milestones = await MilestoneTranslator(self.context).translate(
            github_repo, gitlab_repo
        )
        issues = await IssueReplicator(self.context).replicate(
            github_repo, gitlab_repo, milestones
        )

        self.logger.info(f'Migrated {repo_name}')

        return MigrationResult(
            operation='migrate',
            repository=repo_name,
            status=MigrationStatus.COMPLETED,
            started_at=started_at,
            completed_at=datetime.now(),
            success=True,
            metadata={
                'labels_added': len(labels),
                'milestones_created': len(milestones),
                'issues_created': len(issues),
                'comments_created': sum(len(issue.comments) for issue in issues),
            },
        )

    async def import_one(self, repo_name: str) -> ImportResult:
        """Create the GitHub repository and import the GitLab source into it."""
        return await RepositoryImporter(self.context).import_repository(repo_name)

    async def remove_one(self, repo_name: str) -> RemoteRepository:
        """Delete a repository from the GitHub organization.

        Raises:
            UnknownRepositoryError: No GitHub repository has that name.
            MigrationError: The delete call failed.
        """
        await self.directory.ensure_loaded()

        github_repo = self.directory.find_by_name(RepositorySystem.GITHUB, repo_name)
        if github_repo is None:
            raise UnknownRepositoryError(
                'No GitHub repository with this name', repository=repo_name
            )

        github = self.context.github_client
        try:
            await github.delete_async(github.repo_endpoint(repo_name))
        except APIError as e:
            raise MigrationError(
                f'Failed to delete GitHub repository: {e}',
                repository=repo_name,
                cause=e,
            ) from e

        self.directory.discard(RepositorySystem.GITHUB, repo_name)
        self.logger.info(f'Removed GitHub repository {repo_name}')
        return github_repo

    async def map_authors(self, repo_name: str) -> Dict[str, Optional[str]]:
        """Report the GitHub login each issue author and assignee resolves to.

        Raises:
            SourceNotFoundError: No GitLab project has that name.
            MigrationError: The issues could not be read.
        """
        await self.directory.ensure_loaded()

        gitlab_repo = self.directory.find_by_name(RepositorySystem.GITLAB, repo_name)
        if gitlab_repo is None:
            raise SourceNotFoundError(
                'No GitLab project with this name', repository=repo_name
            )

        try:
            issues = await self.context.gitlab_client.get_paginated_async(
                f'/projects/{gitlab_repo.id}/issues'
            )
        except APIError as e:
            raise MigrationError(
                f'Failed to fetch GitLab issues: {e}', repository=repo_name, cause=e
            ) from e

        usernames = set()
        for issue in issues:
            author = (issue.get('author') or {}).get('username')
            if author:
                usernames.add(author)
            assignee = gitlab_assignee(issue)
            if assignee:
                usernames.add(assignee)

        mapping = self.context.user_mapping
        return {username: mapping.resolve(username) for username in sorted(usernames)}

    async def migrate_all(self) -> MigrationSummary:
        """Migrate every known repository that exists on both systems."""
        await self.directory.ensure_loaded()

        if self.known_repositories:
            names = self.list_known()
        else:
            names = [
                repo.name
                for repo in self.directory.repositories(RepositorySystem.GITLAB)
                if self.directory.find_by_name(RepositorySystem.GITHUB, repo.name)
            ]

        return await self._run_batch('migrate', names, self.migrate_one)

    async def import_all(self) -> MigrationSummary:
        """Import every known GitLab project."""
        await self.directory.ensure_loaded()

        if self.known_repositories:
            names = self.list_known()
        else:
            names = [
                repo.name
                for repo in self.directory.repositories(RepositorySystem.GITLAB)
            ]

        return await self._run_batch('import', names, self.import_one)

    async def _run_batch(
        self,
        operation: str,
        names: List[str],
        action: Callable[[str], Awaitable[object]],
    ) -> MigrationSummary:
        """Run ``action`` for every name, a few repositories at a time.

        Each repository's own steps stay sequential; the semaphore bounds how
        many repositories are in flight.
        """
        started_at = datetime.now()
        semaphore = asyncio.Semaphore(self.context.settings.max_concurrent_repositories)

        self.logger.info(f'Starting {operation} of {len(names)} repositories')

        async def run(name: str) -> MigrationResult:
            async with semaphore:
                item_started = datetime.now()
                try:
                    outcome = await action(name)
                except Exception as e:
                    self.logger.error(f'{operation} of {name} failed: {e}')
                    return MigrationResult(
                        operation=operation,
                        repository=name,
                        status=MigrationStatus.FAILED,
                        started_at=item_started,
                        completed_at=datetime.now(),
                        success=False,
                        error_message=str(e),
                    )

                if isinstance(outcome, MigrationResult):
                    return outcome

                return MigrationResult(
                    operation=operation,
                    repository=name,
                    status=MigrationStatus.COMPLETED,
                    started_at=item_started,
                    completed_at=datetime.now(),
                    success=True,
                    metadata={'polls': getattr(outcome, 'polls', 0)},
                )

        results = list(await asyncio.gather(*(run(name) for name in names)))

        summary = MigrationSummary(
            operation=operation,
            total=len(results),
            successful=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if not r.success),
            started_at=started_at,
            completed_at=datetime.now(),
            results=results,
        )

        self.logger.info(
            f'Finished {operation}: {summary.successful} successful, '
            f'{summary.failed} failed'
        )
        return summary
