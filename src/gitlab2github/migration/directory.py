"""Per-run cache of the repositories known on both systems."""

import asyncio
from typing import Dict, List, Optional

from loguru import logger

from ..api.client import GitHubClient, GitLabClient
from ..api.exceptions import APIError
from ..models.repository import RemoteRepository, RepositorySystem
from .exceptions import DirectoryFetchError


class RepositoryDirectory:
    """Holds the GitLab project list and the GitHub repository list.

    Both lists are fetched on the first ``ensure_loaded`` call and reused for
    the rest of the run. Concurrent first callers wait for a single fetch.
    """

    def __init__(self, gitlab_client: GitLabClient, github_client: GitHubClient):
        self.gitlab_client = gitlab_client
        self.github_client = github_client
        self.logger = logger.bind(component='RepositoryDirectory')

        self._repositories: Optional[Dict[RepositorySystem, List[RemoteRepository]]] = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._repositories is not None

    async def ensure_loaded(self) -> None:
        """Fetch both repository lists unless they are already cached.

        Raises:
            DirectoryFetchError: If either list cannot be fetched. The cache
                stays empty so a later call retries.
        """
        if self._repositories is not None:
            return

        async with self._lock:
            if self._repositories is not None:
                return

            params = {'order_by': 'id', 'sort': 'asc'}
            if self.gitlab_client.config.membership_only:
                params['membership'] = 'true'

            try:
                gitlab_data = await self.gitlab_client.get_paginated_async(
                    '/projects', params=params
                )
            except APIError as e:
                raise DirectoryFetchError(
                    f'Failed to list GitLab projects: {e}', cause=e
                ) from e

            try:
                github_data = await self.github_client.get_paginated_async(
                    self.github_client.org_repos_endpoint
                )
            except APIError as e:
                raise DirectoryFetchError(
                    f'Failed to list GitHub repositories: {e}', cause=e
                ) from e

            self._repositories = {
                RepositorySystem.GITLAB: [
                    RemoteRepository.from_gitlab(item) for item in gitlab_data
                ],
                RepositorySystem.GITHUB: [
                    RemoteRepository.from_github(item) for item in github_data
                ],
            }

            self.logger.info(
                f'Loaded {len(gitlab_data)} GitLab projects and '
                f'{len(github_data)} GitHub repositories'
            )

    def repositories(self, system: RepositorySystem) -> List[RemoteRepository]:
        """Return the cached repositories of one system."""
        if self._repositories is None:
            raise RuntimeError('Repository directory has not been loaded')
        return list(self._repositories[system])

    def find_by_name(
        self, system: RepositorySystem, name: str
    ) -> Optional[RemoteRepository]:
        """Return the repository named exactly ``name``, or None."""
        for repository in self.repositories(system):
            if repository.name == name:
                return repository
        return None

    def add(self, repository: RemoteRepository) -> None:
        """Record a repository created during this run."""
        self.repositories(repository.system)
        self._repositories[repository.system].append(repository)

    def discard(self, system: RepositorySystem, name: str) -> None:
        """Forget a repository removed during this run."""
        self.repositories(system)
        self._repositories[system] = [
            repository
            for repository in self._repositories[system]
            if repository.name != name
        ]
