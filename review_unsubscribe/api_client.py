"""GitHub API client for notifications, pull requests and thread subscriptions."""

import logging
import os
from typing import Any, Dict, Iterator, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import ActionFailure, AuthError, ConfigError, RateLimitError
from .models import Identity, NotificationThread, PullRequestRef, TeamPullRequest

DEFAULT_API_URL = 'https://api.github.com'

# GET /notifications caps per_page at 50
NOTIFICATIONS_PER_PAGE = 50
DEFAULT_PER_PAGE = 100


class GitHubAPIClient:
    """Handles GitHub API requests with retry logic and pagination."""

    def __init__(self, token: str, api_url: str = None):
        """Initialize the GitHub API client.

        Args:
            token: GitHub personal access token for authentication
            api_url: Base API URL, defaults to GITHUB_API_URL or https://api.github.com

        Raises:
            ConfigError: If no token is given
        """
        if not token:
            raise ConfigError("A GitHub token is required. Set GITHUB_TOKEN or run 'gh auth login'.")

        self.token = token
        self.api_url = (api_url or os.environ.get('GITHUB_API_URL') or DEFAULT_API_URL).rstrip('/')
        self.session = requests.Session()

        # Sequential use only, a single small pool is enough
        adapter = HTTPAdapter(
            pool_connections=1,
            pool_maxsize=2,
            max_retries=Retry(
                total=3,
                backoff_factor=0.3,
                status_forcelist=[500, 502, 503, 504],
                allowed_methods=None
            )
        )
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)

        self.session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': '2022-11-28'
        })
        logging.info("Initialized GitHub API client with token")

    def _url(self, path: str) -> str:
        if path.startswith('http://') or path.startswith('https://'):
            return path
        return f"{self.api_url}{path}"

    def _check_response(self, response: requests.Response) -> requests.Response:
        """Translate authentication and rate limit failures into package errors.

        Raises:
            AuthError: On 401
            RateLimitError: On 403/429 with an exhausted rate limit
        """
        if response.status_code == 401:
            logging.error("GitHub rejected the token (401 Unauthorized)")
            raise AuthError("GitHub rejected the token. Check that it is valid and has the 'notifications' and 'repo' scopes.")

        if response.status_code in (403, 429) and response.headers.get('X-RateLimit-Remaining') == '0':
            reset_at = response.headers.get('X-RateLimit-Reset')
            logging.error(f"Rate limit exceeded for {response.url}")
            raise RateLimitError("GitHub API rate limit exceeded", reset_at=reset_at)

        return response

    def request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Make a single request and check it for auth and rate limit failures.

        Args:
            method: HTTP method
            path: API path (``/notifications``) or absolute URL

        Returns:
            Response object, not yet checked for other HTTP errors
        """
        url = self._url(path)
        logging.debug(f"{method} {url}")
        response = self.session.request(method, url, **kwargs)
        return self._check_response(response)

    def get_json(self, path: str, params: Dict = None) -> Any:
        """GET a single resource and return its decoded JSON body."""
        response = self.request('GET', path, params=params)
        response.raise_for_status()
        return response.json()

    def iter_paginated(self, path: str, params: Dict = None, per_page: int = DEFAULT_PER_PAGE) -> Iterator[Dict]:
        """Lazily yield all items of a paginated GitHub API endpoint.

        Pages are requested only as the caller consumes items. Search endpoints,
        which wrap results in ``{"items": [...]}``, are unwrapped.

        Args:
            path: The API endpoint path or URL
            params: Query parameters
            per_page: Page size to request

        Yields:
            Items from all pages, in API order
        """
        page = 1
        params = dict(params or {})
        params['per_page'] = per_page

        while True:
            params['page'] = page
            logging.debug(f"Fetching page {page} from {path}")
            data = self.get_json(path, params=params)

            if isinstance(data, dict):
                data = data.get('items', [])

            if not data:
                break

            yield from data

            # Check if there are more pages
            if len(data) < per_page:
                break

            page += 1

        logging.debug(f"Fetched {page} page(s) from {path}")

    def get_current_user(self) -> Identity:
        """Fetch the authenticated user.

        Returns:
            Identity for the token owner
        """
        return Identity.from_api(self.get_json('/user'))

    def list_notifications(self, unread_only: bool = False, participating: bool = False,
                           since: str = None) -> Iterator[NotificationThread]:
        """Yield notification threads for the authenticated user, read and unread.

        Args:
            unread_only: Only threads not yet marked as read
            participating: Only threads the user directly participates in
            since: Only threads updated at or after this ISO 8601 timestamp

        Yields:
            NotificationThread objects in API order (most recently updated first)
        """
        params = {
            'all': 'false' if unread_only else 'true',
            'participating': 'true' if participating else 'false'
        }
        if since:
            params['since'] = since

        for payload in self.iter_paginated('/notifications', params, per_page=NOTIFICATIONS_PER_PAGE):
            yield NotificationThread.from_api(payload)

    def get_pull_request(self, ref: PullRequestRef) -> Dict:
        """Fetch a pull request."""
        return self.get_json(ref.api_path)

    def get_requested_reviewers(self, ref: PullRequestRef) -> List[str]:
        """Return the logins of users currently requested to review a pull request."""
        pull_request = self.get_pull_request(ref)
        return [reviewer['login'] for reviewer in pull_request.get('requested_reviewers') or []
                if reviewer.get('login')]

    def search_team_review_requests(self, team: str) -> Iterator[TeamPullRequest]:
        """Yield open pull requests that have a team requested as reviewer.

        Args:
            team: Team in ``org/team-slug`` form
        """
        query = f"is:pr is:open archived:false team-review-requested:{team}"
        logging.info(f"Searching pull requests: {query}")
        for item in self.iter_paginated('/search/issues', {'q': query}):
            yield TeamPullRequest.from_search_item(item)

    def get_thread_subscription(self, thread_id: str) -> Optional[Dict]:
        """Fetch the subscription for a notification thread.

        Returns:
            The subscription payload, or None if the user is not subscribed
        """
        response = self.request('GET', f'/notifications/threads/{thread_id}/subscription')
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def delete_thread_subscription(self, thread_id: str) -> bool:
        """Delete the subscription for a notification thread.

        Returns:
            True if a subscription was deleted, False if there was none

        Raises:
            ActionFailure: If the API rejects the deletion
        """
        try:
            response = self.request('DELETE', f'/notifications/threads/{thread_id}/subscription')
        except requests.RequestException as e:
            raise ActionFailure(f"Could not delete subscription: {e}", thread_id=thread_id) from e

        if response.status_code == 404:
            return False
        if not response.ok:
            raise ActionFailure(
                f"GitHub rejected subscription deletion: {response.reason}",
                thread_id=thread_id,
                status_code=response.status_code
            )
        return True
