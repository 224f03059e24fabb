"""Milestone models."""

from typing import Optional

from pydantic import BaseModel, Field


class MilestoneMapping(BaseModel):
    """Link between a GitLab milestone and the GitHub milestone created for it."""

    gitlab_milestone_id: int = Field(..., description='GitLab milestone ID (not iid)')
    github_milestone_number: int = Field(..., description='GitHub milestone number')
    title: str = Field(..., description='Milestone title')
    description: Optional[str] = Field(default=None, description='Description')
    due_date: Optional[str] = Field(
        default=None, description='Due date as sent to GitHub (UTC timestamp)'
    )
    state: str = Field(default='open', description='GitHub milestone state')
