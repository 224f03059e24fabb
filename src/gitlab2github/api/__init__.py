"""HTTP clients for the GitLab and GitHub REST APIs."""

from .client import APIResponse, ClientFactory, GitHubClient, GitLabClient
from .rate_limiter import RateLimiter, WriteThrottle

__all__ = [
    'APIResponse',
    'ClientFactory',
    'GitHubClient',
    'GitLabClient',
    'RateLimiter',
    'WriteThrottle',
]
