"""Issue and comment models."""

from typing import List, Optional

from pydantic import BaseModel, Field


class IssueRecord(BaseModel):
    """A GitLab issue recreated on GitHub."""

    gitlab_issue_id: int = Field(..., description='GitLab issue ID')
    gitlab_issue_iid: int = Field(..., description='GitLab per-project issue iid')
    gitlab_project_id: int = Field(..., description='GitLab project ID')
    github_issue_number: int = Field(..., description='GitHub issue number')
    title: str = Field(..., description='Issue title')
    body: str = Field(default='', description='Issue body')
    labels: List[str] = Field(default_factory=list, description='Label names')
    assignee_username: Optional[str] = Field(
        default=None, description='GitHub login the issue was assigned to'
    )
    milestone_id: Optional[int] = Field(
        default=None, description='GitHub milestone number, if attached'
    )
    state: str = Field(default='open', description='Final GitHub state')
    comments: List['CommentRecord'] = Field(
        default_factory=list, description='Replicated comments'
    )


class CommentRecord(BaseModel):
    """A GitLab note recreated as a GitHub comment."""

    gitlab_note_id: int = Field(..., description='GitLab note ID')
    github_comment_id: Optional[int] = Field(
        default=None, description='GitHub comment ID'
    )
    body: str = Field(default='', description='Comment body')


IssueRecord.update_forward_refs()
