"""Shared fixtures: in-memory GitLab and GitHub clients."""

import itertools
import re

import pytest

from gitlab2github.api.client import APIResponse, GitHubClient, GitLabClient
from gitlab2github.api.exceptions import NotFoundError
from gitlab2github.api.rate_limiter import WriteThrottle
from gitlab2github.config.config import GitHubConfig, GitLabConfig, MigrationConfig
from gitlab2github.migration.directory import RepositoryDirectory
from gitlab2github.migration.strategy import MigrationContext
from gitlab2github.models.user import UserMapping

ORG = 'acme'


class FakeTransport:
    """Replaces the network call of a client with canned routes.

    A route answers with the next of its results on each call; the last
    result repeats. A result may be data, an exception to raise, or a
    callable ``(endpoint, data) -> data``. List data served to a GET is
    paginated with the ``page`` and ``per_page`` parameters.
    """

    def _setup_fake(self):
        self.routes = []
        self.calls = []

    def on(self, method, endpoint, *results):
        self.routes.append((method, re.escape(endpoint), list(results)))

    def on_pattern(self, method, pattern, *results):
        self.routes.append((method, pattern, list(results)))

    def requests(self, method=None):
        return [call for call in self.calls if method is None or call[0] == method]

    async def _make_request_async(
        self, method, endpoint, params=None, data=None, headers=None
    ):
        self.calls.append((method, endpoint, params, data, headers))

        for route_method, pattern, results in self.routes:
            if route_method == method and re.fullmatch(pattern, endpoint):
                result = results.pop(0) if len(results) > 1 else results[0]
                break
        else:
            raise NotFoundError('Resource not found', status_code=404)

        if isinstance(result, Exception):
            raise result
        if callable(result):
            result = result(endpoint, data)

        if method == 'GET' and isinstance(result, list) and params and 'page' in params:
            per_page = params['per_page']
            start = (params['page'] - 1) * per_page
            result = result[start : start + per_page]

        return APIResponse(status_code=200, data=result, headers={}, success=True)


class FakeGitLabClient(FakeTransport, GitLabClient):
    def __init__(self):
        GitLabClient.__init__(
            self, GitLabConfig(url='https://gitlab.example.com', token='gl-token')
        )
        self._setup_fake()


class FakeGitHubClient(FakeTransport, GitHubClient):
    def __init__(self):
        GitHubClient.__init__(self, GitHubConfig(token='gh-token', organization=ORG))
        self._setup_fake()

    def serve_issues(self, repo):
        """Answer issue, state and comment writes the way GitHub numbers them."""
        numbers = itertools.count(1)
        comment_ids = itertools.count(1000)
        base = re.escape(f'/repos/{ORG}/{repo}/issues')

        self.on_pattern(
            'POST', base, lambda endpoint, data: {'number': next(numbers), **data}
        )
        self.on_pattern(
            'PATCH',
            base + r'/\d+',
            lambda endpoint, data: {
                'number': int(endpoint.rsplit('/', 1)[1]),
                **data,
            },
        )
        self.on_pattern(
            'POST',
            base + r'/\d+/comments',
            lambda endpoint, data: {'id': next(comment_ids), **data},
        )


def gitlab_project(project_id, name, description=None):
    return {
        'id': project_id,
        'name': name,
        'description': description,
        'http_url_to_repo': f'https://gitlab.example.com/group/{name}.git',
        'web_url': f'https://gitlab.example.com/group/{name}',
    }


def github_repo(repo_id, name, description=None):
    return {
        'id': repo_id,
        'name': name,
        'description': description,
        'clone_url': f'https://github.com/{ORG}/{name}.git',
        'html_url': f'https://github.com/{ORG}/{name}',
    }


@pytest.fixture
def gitlab():
    client = FakeGitLabClient()
    yield client
    client.close()


@pytest.fixture
def github():
    client = FakeGitHubClient()
    yield client
    client.close()


@pytest.fixture
def settings():
    return MigrationConfig(write_delay=0, import_poll_interval=0.001)


@pytest.fixture
def context(gitlab, github, settings):
    return MigrationContext(
        gitlab_client=gitlab,
        github_client=github,
        directory=RepositoryDirectory(gitlab, github),
        settings=settings,
        user_mapping=UserMapping(users={'alice': 'alice-gh'}, default_assignee='triage-bot'),
        throttle=WriteThrottle(0),
        gitlab_username='gl-user',
        gitlab_password='gl-pass',
    )
