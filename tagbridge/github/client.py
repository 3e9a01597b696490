"""GitHub REST client built on requests."""

import logging
from typing import Any, Dict, Iterator, List, Optional

import requests

from ..changelog.models import Author, Comment, Comparison, PullRequest, Tag
from ..config import Settings
from ..errors import PlatformError


REQUEST_TIMEOUT = 30
PER_PAGE = 100


def make_headers(token: Optional[str]) -> Dict[str, str]:
    """Build standard GitHub HTTP headers for a token."""
    headers = {
        'Accept': 'application/vnd.github+json',
        'X-GitHub-Api-Version': '2022-11-28',
    }
    if token:
        headers['Authorization'] = f'Bearer {token}'
    return headers


def to_pull_request(data: Dict[str, Any]) -> PullRequest:
    """Convert a pull request payload to a PullRequest."""
    user = data.get('user') or {}
    return PullRequest(
        number=data['number'],
        title=data.get('title') or '',
        merged_at=data.get('merged_at'),
        base_ref=(data.get('base') or {}).get('ref') or '',
        head_ref=(data.get('head') or {}).get('ref'),
        author=Author(
            login=user['login'],
            avatar_url=user.get('avatar_url'),
            profile_url=user.get('html_url'),
        ) if user.get('login') else None,
        url=data.get('html_url') or '',
        labels=[label['name'] for label in data.get('labels') or [] if label.get('name')],
    )


class GitHubClient:
    """Changelog source backed by the GitHub REST API."""

    def __init__(self, settings: Settings, logger: Optional[logging.Logger] = None,
                 session: Optional[requests.Session] = None):
        """Initialize GitHub client.

        Args:
            settings: Settings containing host, token and ``owner/repo`` project
            logger: Logger instance
            session: Optional requests session to reuse
        """
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)
        self.base_url = f"{settings.api_host}/repos/{settings.project}"
        self.session = session or requests.Session()
        self.session.headers.update(make_headers(settings.token))

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        if not url.startswith('http'):
            url = f"{self.base_url}{url}"
        try:
            response = self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            self.logger.error(f"GitHub request {method} {url} failed: {e}")
            raise PlatformError(f"GitHub request {method} {url} failed: {e}") from e

    def _paginate(self, path: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Any]:
        """Yield decoded pages, following ``Link: rel="next"`` headers."""
        url = path
        params = dict(params or {}, per_page=PER_PAGE)
        while url:
            response = self._request('GET', url, params=params)
            yield response.json()
            url = response.links.get('next', {}).get('url')
            # The next link already carries the query string
            params = None

    def list_tags(self) -> List[Tag]:
        tags = []
        for page in self._paginate('/tags'):
            tags.extend(Tag(name=tag['name']) for tag in page)
        return tags

    def compare(self, base: str, head: str) -> Comparison:
        """Compare ``base...head``, collecting commits across all pages."""
        status = None
        commits: List[str] = []
        for page in self._paginate(f'/compare/{base}...{head}'):
            status = status or page['status']
            if status not in ('ahead', 'identical'):
                # Only the status matters for tags the head does not contain
                break
            commits.extend(commit['sha'] for commit in page.get('commits', []))
        return Comparison(status=status, commits=commits)

    def pull_requests_for_commit(self, sha: str) -> List[PullRequest]:
        response = self._request('GET', f'/commits/{sha}/pulls')
        return [to_pull_request(pr) for pr in response.json()]

    def pull_request_detail(self, number: int) -> PullRequest:
        response = self._request('GET', f'/pulls/{number}')
        return to_pull_request(response.json())

    def list_comments(self, issue: int) -> List[Comment]:
        comments = []
        for page in self._paginate(f'/issues/{issue}/comments'):
            comments.extend(Comment(id=c['id'], body=c.get('body') or '') for c in page)
        return comments

    def create_comment(self, issue: int, body: str) -> Comment:
        response = self._request('POST', f'/issues/{issue}/comments', json={'body': body})
        data = response.json()
        return Comment(id=data['id'], body=data.get('body') or body)

    def update_comment(self, issue: int, comment_id: int, body: str) -> None:
        self._request('PATCH', f'/issues/comments/{comment_id}', json={'body': body})
