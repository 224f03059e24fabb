"""GitLab and GitHub REST API clients."""

import asyncio
import json
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import aiohttp
import requests
from loguru import logger
from pydantic import BaseModel

from ..config.config import GitHubConfig, GitLabConfig
from .exceptions import (
    APIError,
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitError,
    ValidationError,
)
from .rate_limiter import RateLimiter

USER_AGENT = 'gitlab2github/0.1.0'
GITHUB_JSON = 'application/vnd.github+json'
GITHUB_IMPORT_PREVIEW = 'application/vnd.github.barred-rock-preview'


class APIResponse(BaseModel):
    """Standard API response wrapper."""

    status_code: int
    data: Any
    headers: Dict[str, str]
    success: bool


def _retry_after(value: Optional[str], default: int = 60) -> int:
    """Seconds to wait from a Retry-After header in seconds or HTTP-date form."""
    if not value:
        return default

    try:
        return int(value)
    except ValueError:
        pass

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return default

    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0, int((when - datetime.now(timezone.utc)).total_seconds()))


def _raise_for_status(
    status: int, headers: Dict[str, str], error_data: Any, text: str = ''
) -> None:
    """Translate an HTTP error status into the matching APIError subclass."""
    if status < 400:
        return

    if isinstance(error_data, dict):
        message = error_data.get('message') or error_data.get('error')
        message = message or f'HTTP {status}'
    else:
        message = f'HTTP {status}: {text}' if text else f'HTTP {status}'
        error_data = None

    # GitHub reports secondary rate limits as 403 with Retry-After
    if status == 429 or (status == 403 and 'Retry-After' in headers):
        retry_after = _retry_after(headers.get('Retry-After'))
        raise RateLimitError(
            f'Rate limit exceeded. Retry after {retry_after} seconds',
            retry_after=retry_after,
            status_code=status,
            response_data=error_data,
        )

    if status == 401:
        raise AuthenticationError(
            'Authentication failed', status_code=status, response_data=error_data
        )

    if status == 403:
        raise PermissionDeniedError(
            f'Permission denied: {message}',
            status_code=status,
            response_data=error_data,
        )

    if status == 404:
        raise NotFoundError(
            'Resource not found', status_code=status, response_data=error_data
        )

    if status == 422:
        raise ValidationError(
            f'Validation failed: {message}',
            status_code=status,
            response_data=error_data,
        )

    raise APIError(
        f'API request failed: {message}',
        status_code=status,
        response_data=error_data,
    )


class RESTClient:
    """Shared request plumbing for the GitLab and GitHub clients.

    Subclasses provide the base URL and the authentication headers.
    """

    name = 'REST'

    def __init__(
        self,
        base_url: str,
        auth_headers: Dict[str, str],
        timeout: int = 30,
        rate_limit_per_second: float = 10.0,
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.rate_limiter = RateLimiter(rate_limit_per_second)

        self.headers = {
            'Content-Type': 'application/json',
            'User-Agent': USER_AGENT,
        }
        self.headers.update(auth_headers)

        self.session = requests.Session()
        self.session.headers.update(self.headers)

        logger.info(f'Initialized {self.name} client for {self.base_url}')

    def _build_url(self, endpoint: str) -> str:
        """Build full API URL from endpoint.

        Args:
            endpoint: API endpoint path

        Returns:
            Full API URL
        """
        return urljoin(self.base_url + '/', endpoint.lstrip('/'))

    def _handle_response(self, response: requests.Response) -> APIResponse:
        """Convert a synchronous response to the standard format.

        Raises:
            APIError: For various API errors
        """
        headers = dict(response.headers)

        if response.status_code >= 400:
            try:
                error_data = response.json()
            except ValueError:
                error_data = None
            _raise_for_status(
                response.status_code, headers, error_data, getattr(response, 'text', '')
            )

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = response.text

        return APIResponse(
            status_code=response.status_code,
            data=data,
            headers=headers,
            success=200 <= response.status_code < 300,
        )

    async def _make_request_async(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        """Make asynchronous API request.

        Args:
            method: HTTP method
            endpoint: API endpoint
            params: Query parameters
            data: Request body data
            headers: Headers overriding the client defaults

        Returns:
            API response
        """
        await self.rate_limiter.acquire()

        url = self._build_url(endpoint)
        request_headers = dict(self.headers)
        if headers:
            request_headers.update(headers)

        logger.debug(f'{method} {url} params={params}')

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(
            headers=request_headers, timeout=timeout
        ) as session:
            try:
                async with session.request(
                    method=method, url=url, params=params, json=data
                ) as response:
                    response_headers = dict(response.headers)
                    response_text = await response.text()

                    try:
                        response_data = (
                            json.loads(response_text) if response_text else None
                        )
                    except (ValueError, json.JSONDecodeError):
                        response_data = response_text

                    _raise_for_status(
                        response.status, response_headers, response_data, response_text
                    )

                    return APIResponse(
                        status_code=response.status,
                        data=response_data,
                        headers=response_headers,
                        success=200 <= response.status < 300,
                    )

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(f'Network error during {method} {url}: {e!r}')
                raise APIError(f'Network error: {e!r}') from e

    def get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs
    ) -> APIResponse:
        """Make a synchronous GET request."""
        url = self._build_url(endpoint)

        try:
            response = self.session.get(url, params=params, **kwargs)
            return self._handle_response(response)
        except requests.RequestException as e:
            logger.error(f'Network error during GET request: {e}')
            raise APIError(f'Network error: {e}') from e

    async def get_async(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        return await self._make_request_async(
            'GET', endpoint, params=params, headers=headers
        )

    async def post_async(
        self,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        return await self._make_request_async(
            'POST', endpoint, data=data, headers=headers
        )

    async def put_async(
        self,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        return await self._make_request_async(
            'PUT', endpoint, data=data, headers=headers
        )

    async def patch_async(
        self,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> APIResponse:
        return await self._make_request_async(
            'PATCH', endpoint, data=data, headers=headers
        )

    async def delete_async(
        self, endpoint: str, headers: Optional[Dict[str, str]] = None
    ) -> APIResponse:
        return await self._make_request_async('DELETE', endpoint, headers=headers)

    async def get_paginated_async(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        per_page: int = 100,
    ) -> List[Dict[str, Any]]:
        """Get all pages of a paginated endpoint.

        Args:
            endpoint: API endpoint
            params: Query parameters
            per_page: Items per page

        Returns:
            List of all items from all pages
        """
        all_items: List[Dict[str, Any]] = []
        page = 1

        params = dict(params or {})
        params['per_page'] = per_page

        while True:
            params['page'] = page
            response = await self.get_async(endpoint, params=dict(params))

            items = response.data
            if not items:
                break

            all_items.extend(items)

            total_pages = response.headers.get('X-Total-Pages')
            if total_pages and page >= int(total_pages):
                break

            if len(items) < per_page:
                break

            page += 1

        logger.debug(f'Retrieved {len(all_items)} items from {endpoint}')
        return all_items

    def test_connection(self) -> bool:
        """Test connection to the API.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            response = self.get('/user')
            return response.success
        except APIError as e:
            logger.error(f'{self.name} connection test failed: {e}')
            return False

    def close(self):
        """Close the client session."""
        self.session.close()
        logger.debug(f'{self.name} client session closed')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class GitLabClient(RESTClient):
    """GitLab API client with authentication."""

    name = 'GitLab'

    def __init__(self, config: GitLabConfig):
        """Initialize GitLab client.

        Args:
            config: GitLab instance configuration
        """
        if not config.token:
            raise AuthenticationError('No GitLab token provided')

        self.config = config
        super().__init__(
            config.url + '/api/' + config.api_version,
            {'Private-Token': config.token},
            timeout=config.timeout,
            rate_limit_per_second=config.rate_limit_per_second,
        )


class GitHubClient(RESTClient):
    """GitHub API client with authentication."""

    name = 'GitHub'

    def __init__(self, config: GitHubConfig):
        """Initialize GitHub client.

        Args:
            config: GitHub configuration
        """
        if not config.token:
            raise AuthenticationError('No GitHub token provided')

        self.config = config
        super().__init__(
            config.url,
            {'Authorization': f'token {config.token}', 'Accept': GITHUB_JSON},
            timeout=config.timeout,
            rate_limit_per_second=config.rate_limit_per_second,
        )

    def repo_endpoint(self, name: str, suffix: str = '') -> str:
        """Build the endpoint of a repository in the configured organization."""
        endpoint = f'/repos/{self.config.organization}/{name}'
        return f'{endpoint}/{suffix.lstrip("/")}' if suffix else endpoint

    @property
    def org_repos_endpoint(self) -> str:
        return f'/orgs/{self.config.organization}/repos'


class ClientFactory:
    """Factory for creating API clients."""

    @staticmethod
    def create_gitlab_client(config: GitLabConfig) -> GitLabClient:
        """Create GitLab client from configuration.

        Raises:
            AuthenticationError: If no token is configured
        """
        if not config.token:
            raise AuthenticationError('A GitLab token must be provided')

        return GitLabClient(config)

    @staticmethod
    def create_github_client(config: GitHubConfig) -> GitHubClient:
        """Create GitHub client from configuration.

        Raises:
            AuthenticationError: If no token is configured
        """
        if not config.token:
            raise AuthenticationError('A GitHub token must be provided')

        return GitHubClient(config)
