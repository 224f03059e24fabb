"""User mapping model."""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class UserMapping(BaseModel):
    """Static GitLab username to GitHub login table.

    Usernames without an entry resolve to ``default_assignee``; when no
    default is configured they resolve to nothing and the issue is left
    unassigned.
    """

    users: Dict[str, str] = Field(
        default_factory=dict, description='GitLab username to GitHub login'
    )
    default_assignee: Optional[str] = Field(
        default=None, description='Fallback GitHub login'
    )

    def resolve(self, gitlab_username: Optional[str]) -> Optional[str]:
        """Return the GitHub login for a GitLab username."""
        if not gitlab_username:
            return None
        return self.users.get(gitlab_username, self.default_assignee)
