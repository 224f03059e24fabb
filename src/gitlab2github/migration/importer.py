"""Create a GitHub repository and have GitHub import the GitLab source into it."""

import asyncio
import re

from ..api.client import GITHUB_IMPORT_PREVIEW
from ..api.exceptions import APIError
from ..models.repository import (
    ImportResult,
    ImportState,
    RemoteRepository,
    RepositorySystem,
)
from .exceptions import (
    ImportFailedError,
    ImportTimeoutError,
    SourceNotFoundError,
    TargetAlreadyExistsError,
)
from .strategy import MigrationStrategy

IMPORT_COMPLETE = 'complete'
IMPORT_FAILURES = ('error', 'auth_failed')

_WHITESPACE_CONTROL = re.compile(r'[\r\n\t]+')


def clean_description(description, fallback: str) -> str:
    """Collapse line breaks and tabs to single spaces; use ``fallback`` if empty."""
    cleaned = _WHITESPACE_CONTROL.sub(' ', description or '').strip()
    return cleaned or fallback


class RepositoryImporter(MigrationStrategy):
    """Runs one repository import from start to finish.

    The importer walks START, VERIFY_SOURCE_EXISTS, VERIFY_TARGET_ABSENT,
    CREATE_TARGET, TRIGGER_IMPORT and POLL_IMPORT, and ends in COMPLETE or
    FAILED. Use a new instance per import.
    """

    def __init__(self, context):
        super().__init__(context)
        self.state = ImportState.START
        self.transitions = [ImportState.START]

    def _enter(self, state: ImportState) -> None:
        self.state = state
        self.transitions.append(state)
        self.logger.debug(f'Import state: {state.value}')

    async def import_repository(self, project_name: str) -> ImportResult:
        """Import the GitLab project ``project_name`` into a new GitHub repository.

        Raises:
            SourceNotFoundError: No GitLab project has that name.
            TargetAlreadyExistsError: The GitHub repository already exists.
            ImportFailedError: A call failed or GitHub reported an error.
            ImportTimeoutError: The import did not finish in time.
        """
        if self.state != ImportState.START:
            raise RuntimeError('RepositoryImporter instances are single-use')

        try:
            return await self._run(project_name)
        except Exception:
            self._enter(ImportState.FAILED)
            raise

    async def _run(self, project_name: str) -> ImportResult:
        directory = self.context.directory
        await directory.ensure_loaded()

        self._enter(ImportState.VERIFY_SOURCE_EXISTS)
        source = directory.find_by_name(RepositorySystem.GITLAB, project_name)
        if source is None:
            raise SourceNotFoundError(
                'No GitLab project with this name', repository=project_name
            )

        self._enter(ImportState.VERIFY_TARGET_ABSENT)
        if directory.find_by_name(RepositorySystem.GITHUB, project_name) is not None:
            raise TargetAlreadyExistsError(
                'GitHub repository already exists', repository=project_name
            )

        self._enter(ImportState.CREATE_TARGET)
        self.logger.info(f'{project_name}: creating GitHub repository')
        try:
            response = await self.github.post_async(
                self.github.org_repos_endpoint,
                data={
                    'name': project_name,
                    'private': True,
                    'description': clean_description(source.description, project_name),
                },
            )
        except APIError as e:
            raise ImportFailedError(
                f'Failed to create GitHub repository: {e}',
                repository=project_name,
                cause=e,
            ) from e

        target = RemoteRepository.from_github(response.data)
        directory.add(target)

        self._enter(ImportState.TRIGGER_IMPORT)
        self.logger.info(f'{project_name}: starting import from {source.web_url}')
        import_endpoint = self.github.repo_endpoint(project_name, 'import')
        preview = {'Accept': GITHUB_IMPORT_PREVIEW}
        try:
            await self.github.put_async(
                import_endpoint,
                data={
                    'vcs_url': source.web_url,
                    'vcs': 'git',
                    'vcs_username': self.context.gitlab_username,
                    'vcs_password': self.context.gitlab_password,
                },
                headers=preview,
            )
        except APIError as e:
            raise ImportFailedError(
                f'Failed to start import: {e}', repository=project_name, cause=e
            ) from e

        self._enter(ImportState.POLL_IMPORT)
        settings = self.context.settings
        loop = asyncio.get_running_loop()
        started = loop.time()
        polls = 0

        while True:
            try:
                response = await self.github.get_async(import_endpoint, headers=preview)
            except APIError as e:
                raise ImportFailedError(
                    f'Failed to check import status: {e}',
                    repository=project_name,
                    cause=e,
                ) from e
            polls += 1

            status = (response.data or {}).get('status')
            status_text = (response.data or {}).get('status_text')
            self.logger.debug(
                f'{project_name}: import status {status} ({status_text}), poll {polls}'
            )

            if status == IMPORT_COMPLETE:
                break

            if status in IMPORT_FAILURES:
                raise ImportFailedError(
                    f'Import failed with status {status}: {status_text}',
                    repository=project_name,
                    status_text=status_text,
                )

            elapsed = loop.time() - started
            if settings.import_timeout is not None and elapsed >= settings.import_timeout:
                raise ImportTimeoutError(
                    f'Import still {status} after {elapsed:.0f} seconds',
                    repository=project_name,
                    status_text=status_text,
                )

            await asyncio.sleep(settings.import_poll_interval)

        self._enter(ImportState.COMPLETE)
        self.logger.info(f'{project_name}: import complete after {polls} checks')

        return ImportResult(
            repository=project_name,
            state=self.state,
            transitions=list(self.transitions),
            status_text=status_text,
            polls=polls,
            github_repository=target,
        )
