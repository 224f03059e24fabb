"""Recreate GitLab issues and their notes on GitHub."""

from typing import Any, Dict, List, Optional

from ..api.exceptions import APIError
from ..models.issue import CommentRecord, IssueRecord
from ..models.milestone import MilestoneMapping
from ..models.repository import RemoteRepository
from .exceptions import CommentReplicationError, IssueReplicationError
from .milestones import github_state
from .strategy import MigrationStrategy


def gitlab_assignee(issue: Dict[str, Any]) -> Optional[str]:
    """Return the username of the first assignee of a GitLab issue."""
    assignee = issue.get('assignee')
    if not assignee and issue.get('assignees'):
        assignee = issue['assignees'][0]
    return assignee.get('username') if assignee else None


class IssueReplicator(MigrationStrategy):
    """Replays the issues of a GitLab project, with their notes, on GitHub.

    Issues are handled one at a time in ascending ``iid`` order so GitHub
    numbers follow GitLab's. Each issue is created, then patched to its final
    state, then its notes are posted as comments. Every GitHub write is
    preceded by the context's write throttle.
    """

    async def replicate(
        self,
        github_repo: RemoteRepository,
        gitlab_repo: RemoteRepository,
        milestone_mapping: List[MilestoneMapping],
    ) -> List[IssueRecord]:
        """Recreate every issue of ``gitlab_repo`` in ``github_repo``.

        Raises:
            IssueReplicationError: On the first issue or comment that fails.
                Issues created before the failure are kept.
        """
        name = github_repo.name
        milestones = {
            mapping.gitlab_milestone_id: mapping.github_milestone_number
            for mapping in milestone_mapping
        }

        try:
            issues = await self.gitlab.get_paginated_async(
                f'/projects/{gitlab_repo.id}/issues',
                params={'order_by': 'created_at', 'sort': 'asc'},
            )
        except APIError as e:
            raise IssueReplicationError(
                f'Failed to fetch GitLab issues: {e}', repository=name, cause=e
            ) from e

        records = []
        for issue in sorted(issues, key=lambda i: i['iid']):
            record = await self._create_issue(github_repo, gitlab_repo, issue, milestones)
            record.comments = await self.replicate_comments(
                github_repo, gitlab_repo, record
            )
            records.append(record)

        self.logger.info(f'{name}: replicated {len(records)} issues')
        return records

    async def _create_issue(
        self,
        github_repo: RemoteRepository,
        gitlab_repo: RemoteRepository,
        issue: Dict[str, Any],
        milestones: Dict[int, int],
    ) -> IssueRecord:
        name = github_repo.name
        iid = issue['iid']

        assignee = self.context.user_mapping.resolve(gitlab_assignee(issue))

        milestone_number = None
        if issue.get('milestone'):
            milestone_number = milestones.get(issue['milestone']['id'])
            if milestone_number is None:
                self.logger.warning(
                    f'{name}: issue {iid} milestone '
                    f'{issue["milestone"]["id"]} was not migrated, skipping it'
                )

        payload = {
            'title': issue['title'],
            'body': issue.get('description') or '',
            'labels': list(issue.get('labels') or []),
            'assignees': [assignee] if assignee else [],
        }
        if milestone_number is not None:
            payload['milestone'] = milestone_number

        state = github_state(issue.get('state'))

        try:
            await self.context.throttle.wait()
            response = await self.github.post_async(
                self.github.repo_endpoint(name, 'issues'), data=payload
            )
            number = response.data['number']

            await self.context.throttle.wait()
            await self.github.patch_async(
                self.github.repo_endpoint(name, f'issues/{number}'),
                data={'state': state},
            )
        except APIError as e:
            raise IssueReplicationError(
                f'Failed to replicate issue {iid}: {e}', repository=name, cause=e
            ) from e

        self.logger.debug(f'{name}: issue {iid} -> #{number} ({state})')

        return IssueRecord(
            gitlab_issue_id=issue['id'],
            gitlab_issue_iid=iid,
            gitlab_project_id=gitlab_repo.id,
            github_issue_number=number,
            title=payload['title'],
            body=payload['body'],
            labels=payload['labels'],
            assignee_username=assignee,
            milestone_id=milestone_number,
            state=state,
        )

    async def replicate_comments(
        self,
        github_repo: RemoteRepository,
        gitlab_repo: RemoteRepository,
        issue: IssueRecord,
    ) -> List[CommentRecord]:
        """Post the notes of a GitLab issue as comments on its GitHub copy.

        Only the note body is carried over.

        Raises:
            CommentReplicationError: If the notes cannot be read or a comment
                cannot be created.
        """
        name = github_repo.name
        endpoint = self.github.repo_endpoint(
            name, f'issues/{issue.github_issue_number}/comments'
        )

        try:
            notes = await self.gitlab.get_paginated_async(
                f'/projects/{gitlab_repo.id}/issues/{issue.gitlab_issue_iid}/notes',
                params={'order_by': 'created_at', 'sort': 'asc'},
            )
        except APIError as e:
            raise CommentReplicationError(
                f'Failed to fetch notes of issue {issue.gitlab_issue_iid}: {e}',
                repository=name,
                cause=e,
            ) from e

        comments = []
        for note in sorted(notes, key=lambda n: n['id']):
            try:
                await self.context.throttle.wait()
                response = await self.github.post_async(
                    endpoint, data={'body': note.get('body') or ''}
                )
            except APIError as e:
                raise CommentReplicationError(
                    f'Failed to replicate note {note["id"]} of issue '
                    f'{issue.gitlab_issue_iid}: {e}',
                    repository=name,
                    cause=e,
                ) from e

            comments.append(
                CommentRecord(
                    gitlab_note_id=note['id'],
                    github_comment_id=(response.data or {}).get('id'),
                    body=note.get('body') or '',
                )
            )

        if comments:
            self.logger.debug(
                f'{name}: #{issue.github_issue_number} got {len(comments)} comments'
            )
        return comments
