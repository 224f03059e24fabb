"""Migration errors.

Every error names the repository it concerns and keeps the underlying
exception, if any, on ``cause``.
"""

from typing import Optional


class MigrationError(Exception):
    """Base exception for migration errors."""

    def __init__(
        self,
        message: str,
        repository: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        """Initialize migration error.

        Args:
            message: Error message
            repository: Name of the repository being processed
            cause: Underlying exception
        """
        if repository:
            message = f'{repository}: {message}'
        super().__init__(message)
        self.repository = repository
        self.cause = cause


class DirectoryFetchError(MigrationError):
    """The GitLab project list or the GitHub repository list could not be fetched."""

    pass


class SourceNotFoundError(MigrationError):
    """No GitLab project has the requested name."""

    pass


class TargetAlreadyExistsError(MigrationError):
    """A GitHub repository with the requested name already exists."""

    pass


class UnknownRepositoryError(MigrationError):
    """The named repository is not known on the system it is needed on."""

    pass


class LabelSyncError(MigrationError):
    """A label could not be read or created."""

    pass


class MilestoneError(MigrationError):
    """A milestone could not be read or created."""

    pass


class IssueReplicationError(MigrationError):
    """An issue could not be read, created or updated."""

    pass


class CommentReplicationError(IssueReplicationError):
    """A note could not be read or recreated as a comment."""

    pass


class ImportFailedError(MigrationError):
    """GitHub could not start or finish importing the repository."""

    def __init__(self, message: str, status_text: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_text = status_text


class ImportTimeoutError(ImportFailedError):
    """The import did not finish within the configured time."""

    pass
