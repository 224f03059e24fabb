"""Copy GitLab label definitions to a GitHub repository."""

from typing import List

from ..api.exceptions import APIError
from ..models.label import LabelDef
from ..models.repository import RemoteRepository
from .exceptions import LabelSyncError
from .strategy import MigrationStrategy


class LabelSynchronizer(MigrationStrategy):
    """Creates the GitLab labels that the GitHub repository does not have yet.

    Labels are matched by exact name. The colour of a label that already
    exists on GitHub is left alone.
    """

    async def sync(
        self, github_repo: RemoteRepository, gitlab_repo: RemoteRepository
    ) -> List[LabelDef]:
        """Create missing labels and return the ones that were added.

        Raises:
            LabelSyncError: If labels cannot be read or a label cannot be
                created. Labels created before the failure remain.
        """
        name = github_repo.name

        try:
            gitlab_labels = [
                LabelDef(name=label['name'], color=label.get('color') or 'ededed')
                for label in await self.gitlab.get_paginated_async(
                    f'/projects/{gitlab_repo.id}/labels'
                )
            ]
        except APIError as e:
            raise LabelSyncError(
                f'Failed to fetch GitLab labels: {e}', repository=name, cause=e
            ) from e

        if not gitlab_labels:
            self.logger.info(f'{name}: no labels to migrate')
            return []

        try:
            existing = {
                label['name']
                for label in await self.github.get_paginated_async(
                    self.github.repo_endpoint(name, 'labels')
                )
            }
        except APIError as e:
            raise LabelSyncError(
                f'Failed to fetch GitHub labels: {e}', repository=name, cause=e
            ) from e

        added = []
        for label in gitlab_labels:
            if label.name in existing:
                self.logger.debug(f'{name}: label {label.name!r} already exists')
                continue

            try:
                await self.github.post_async(
                    self.github.repo_endpoint(name, 'labels'),
                    data={'name': label.name, 'color': label.color},
                )
            except APIError as e:
                raise LabelSyncError(
                    f'Failed to create label {label.name!r}: {e}',
                    repository=name,
                    cause=e,
                ) from e

            existing.add(label.name)
            added.append(label)
            self.logger.debug(f'{name}: created label {label.name!r}')

        self.logger.info(
            f'{name}: added {len(added)} of {len(gitlab_labels)} labels'
        )
        return added
