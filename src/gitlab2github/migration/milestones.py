"""Recreate GitLab milestones on GitHub."""

from datetime import datetime, timezone
from typing import List, Optional

from ..api.exceptions import APIError
from ..models.milestone import MilestoneMapping
from ..models.repository import RemoteRepository
from .exceptions import MilestoneError
from .strategy import MigrationStrategy


def to_github_timestamp(due_date: Optional[str]) -> Optional[str]:
    """Convert a GitLab due date to the UTC timestamp GitHub expects.

    GitLab sends plain dates (``2024-01-15``); full ISO timestamps are also
    accepted and converted to UTC.
    """
    if not due_date:
        return None

    if len(due_date) == 10:
        moment = datetime.strptime(due_date, '%Y-%m-%d').replace(tzinfo=timezone.utc)
    else:
        moment = datetime.fromisoformat(due_date.replace('Z', '+00:00'))
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)

    return moment.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def github_state(gitlab_state: Optional[str]) -> str:
    """Map a GitLab issue or milestone state to a GitHub state."""
    return 'closed' if gitlab_state == 'closed' else 'open'


class MilestoneTranslator(MigrationStrategy):
    """Creates one GitHub milestone per GitLab milestone, oldest first.

    Milestones are created one at a time in ascending ``iid`` order so the
    numbers GitHub hands out follow the GitLab creation order.
    """

    async def translate(
        self, github_repo: RemoteRepository, gitlab_repo: RemoteRepository
    ) -> List[MilestoneMapping]:
        """Create the milestones and return the GitLab ID to GitHub number map.

        Raises:
            MilestoneError: On the first milestone that cannot be read or
                created. Milestones already created are kept.
        """
        name = github_repo.name

        try:
            milestones = await self.gitlab.get_paginated_async(
                f'/projects/{gitlab_repo.id}/milestones'
            )
        except APIError as e:
            raise MilestoneError(
                f'Failed to fetch GitLab milestones: {e}', repository=name, cause=e
            ) from e

        mappings = []
        for milestone in sorted(milestones, key=lambda m: m['iid']):
            state = github_state(milestone.get('state'))
            payload = {
                'title': milestone['title'],
                'description': milestone.get('description') or '',
                'state': state,
            }

            try:
                due_on = to_github_timestamp(milestone.get('due_date'))
            except ValueError as e:
                raise MilestoneError(
                    f'Invalid due date on milestone {milestone["title"]!r}: {e}',
                    repository=name,
                    cause=e,
                ) from e
            if due_on:
                payload['due_on'] = due_on

            try:
                response = await self.github.post_async(
                    self.github.repo_endpoint(name, 'milestones'), data=payload
                )
            except APIError as e:
                raise MilestoneError(
                    f'Failed to create milestone {milestone["title"]!r}: {e}',
                    repository=name,
                    cause=e,
                ) from e

            mapping = MilestoneMapping(
                gitlab_milestone_id=milestone['id'],
                github_milestone_number=response.data['number'],
                title=milestone['title'],
                description=payload['description'],
                due_date=due_on,
                state=state,
            )
            mappings.append(mapping)
            self.logger.debug(
                f'{name}: milestone {mapping.title!r} '
                f'{mapping.gitlab_milestone_id} -> #{mapping.github_milestone_number}'
            )

        self.logger.info(f'{name}: created {len(mappings)} milestones')
        return mappings
