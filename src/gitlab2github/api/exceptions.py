"""Errors raised by the GitLab and GitHub REST clients.

HTTP statuses map onto the classes below: 401 is ``AuthenticationError``,
403 is ``PermissionDeniedError`` unless it carries ``Retry-After``, 404 is
``NotFoundError``, 422 is ``ValidationError`` and 429 is ``RateLimitError``.
Any other failure, timeouts and dropped connections included, is a plain
``APIError``. Migration components wrap these in their own errors.
"""

from typing import Optional


class APIError(Exception):
    """Base exception for GitLab and GitHub API errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[dict] = None,
    ):
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_data: Response data from API
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class AuthenticationError(APIError):
    """The token was rejected (401)."""

    pass


class RateLimitError(APIError):
    """The server asked the client to slow down (429, or 403 with Retry-After)."""

    def __init__(self, message: str, retry_after: int = 60, **kwargs):
        """Initialize rate limit error.

        Args:
            message: Error message
            retry_after: Seconds to wait before retry
            **kwargs: Additional arguments for base class
        """
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class NotFoundError(APIError):
    """The project, repository or issue does not exist (404)."""

    pass


class PermissionDeniedError(APIError):
    """The token lacks the scope for this call (403)."""

    pass


class ValidationError(APIError):
    """The API rejected the request payload."""

    pass
