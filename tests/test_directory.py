"""Tests for the repository directory."""

import asyncio

import pytest

from gitlab2github.api.exceptions import APIError
from gitlab2github.migration.directory import RepositoryDirectory
from gitlab2github.migration.exceptions import DirectoryFetchError
from gitlab2github.models.repository import RepositorySystem

from conftest import ORG, github_repo, gitlab_project


class TestRepositoryDirectory:
    """Test repository list caching."""

    @pytest.mark.asyncio
    async def test_loads_both_lists_once(self, gitlab, github):
        """Test that repeated calls reuse the first fetch."""
        gitlab.on('GET', '/projects', [gitlab_project(1, 'widget')])
        github.on('GET', f'/orgs/{ORG}/repos', [github_repo(10, 'widget')])
        directory = RepositoryDirectory(gitlab, github)

        await directory.ensure_loaded()
        await directory.ensure_loaded()

        assert len(gitlab.calls) == 1
        assert len(github.calls) == 1
        assert directory.find_by_name(RepositorySystem.GITLAB, 'widget').id == 1
        assert directory.find_by_name(RepositorySystem.GITHUB, 'widget').id == 10

    @pytest.mark.asyncio
    async def test_concurrent_first_load_fetches_once(self, gitlab, github):
        """Test that simultaneous first callers share one fetch."""
        gitlab.on('GET', '/projects', [gitlab_project(1, 'widget')])
        github.on('GET', f'/orgs/{ORG}/repos', [])
        directory = RepositoryDirectory(gitlab, github)

        await asyncio.gather(*(directory.ensure_loaded() for _ in range(5)))

        assert len(gitlab.calls) == 1
        assert len(github.calls) == 1

    @pytest.mark.asyncio
    async def test_collects_every_page(self, gitlab, github):
        """Test that more than one page of projects is collected."""
        gitlab.on(
            'GET', '/projects', [gitlab_project(i, f'p{i}') for i in range(1, 151)]
        )
        github.on('GET', f'/orgs/{ORG}/repos', [])
        directory = RepositoryDirectory(gitlab, github)

        await directory.ensure_loaded()

        assert len(directory.repositories(RepositorySystem.GITLAB)) == 150
        assert [call[2]['page'] for call in gitlab.calls] == [1, 2]
        assert gitlab.calls[0][2]['per_page'] == 100
        assert gitlab.calls[0][2]['membership'] == 'true'

    @pytest.mark.asyncio
    async def test_name_match_is_case_sensitive(self, gitlab, github):
        """Test that names must match exactly."""
        gitlab.on('GET', '/projects', [gitlab_project(1, 'Widget')])
        github.on('GET', f'/orgs/{ORG}/repos', [])
        directory = RepositoryDirectory(gitlab, github)

        await directory.ensure_loaded()

        assert directory.find_by_name(RepositorySystem.GITLAB, 'widget') is None
        assert directory.find_by_name(RepositorySystem.GITLAB, 'Widget') is not None

    @pytest.mark.asyncio
    async def test_fetch_error_leaves_cache_empty(self, gitlab, github):
        """Test that a failed fetch can be retried."""
        gitlab.on(
            'GET',
            '/projects',
            APIError('boom', status_code=500),
            [gitlab_project(1, 'widget')],
        )
        github.on('GET', f'/orgs/{ORG}/repos', [])
        directory = RepositoryDirectory(gitlab, github)

        with pytest.raises(DirectoryFetchError):
            await directory.ensure_loaded()
        assert directory.loaded is False

        await directory.ensure_loaded()
        assert directory.loaded is True
        assert directory.find_by_name(RepositorySystem.GITLAB, 'widget') is not None

    def test_lookup_before_load(self, gitlab, github):
        """Test that lookups require a loaded directory."""
        directory = RepositoryDirectory(gitlab, github)

        with pytest.raises(RuntimeError):
            directory.find_by_name(RepositorySystem.GITHUB, 'widget')
