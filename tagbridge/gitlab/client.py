"""GitLab client wrapper using python-gitlab library."""

import logging
from typing import Any, Dict, List, Optional

import gitlab
import requests
from gitlab.v4.objects import Project

from ..changelog.models import Author, Comment, Comparison, PullRequest, Tag
from ..config import Settings
from ..errors import PlatformError


def to_pull_request(data: Dict[str, Any]) -> PullRequest:
    """Convert a merge request payload to a PullRequest."""
    author = data.get('author') or {}
    return PullRequest(
        number=data['iid'],
        title=data.get('title') or '',
        merged_at=data.get('merged_at'),
        base_ref=data.get('target_branch') or '',
        head_ref=data.get('source_branch'),
        author=Author(
            login=author['username'],
            avatar_url=author.get('avatar_url'),
            profile_url=author.get('web_url'),
        ) if author.get('username') else None,
        url=data.get('web_url') or '',
        labels=list(data.get('labels') or []),
    )


class GitLabClient:
    """Changelog source backed by the GitLab API.

    Merge requests stand in for pull requests and their notes for comments.
    """

    def __init__(self, settings: Settings, logger: Optional[logging.Logger] = None):
        """Initialize GitLab client.

        Args:
            settings: Settings containing host, token and project
            logger: Logger instance
        """
        self.settings = settings
        self.project = settings.project
        self.logger = logger or logging.getLogger(__name__)

        self.gl = gitlab.Gitlab(
            url=settings.api_host,
            private_token=settings.token,
            timeout=300
        )

        self._project_cache: Dict[str, Project] = {}

    def _get_project(self) -> Project:
        """Get project instance with caching."""
        if self.project not in self._project_cache:
            self._project_cache[self.project] = self.gl.projects.get(self.project)
        return self._project_cache[self.project]

    def _fail(self, action: str, error: Exception) -> PlatformError:
        self.logger.error(f"Error {action}: {error}")
        return PlatformError(f"GitLab request failed while {action}: {error}")

    def list_tags(self) -> List[Tag]:
        """List project tags, most recently updated first."""
        try:
            proj = self._get_project()
            tags = proj.tags.list(get_all=True, per_page=100)
            return [Tag(name=tag.name) for tag in tags]
        except (gitlab.GitlabError, requests.RequestException) as e:
            raise self._fail("listing tags", e) from e

    def compare(self, base: str, head: str) -> Comparison:
        """Compare a tag (or any ref) with the head commit.

        GitLab has no ahead/behind status, so it is derived from the merge
        base of the two commits.

        Args:
            base: Base ref
            head: Head commit SHA or ref

        Returns:
            Comparison status and the commits reachable from head but not base
        """
        try:
            proj = self._get_project()
            base_sha = proj.commits.get(base).id
            head_sha = proj.commits.get(head).id
            if base_sha == head_sha:
                return Comparison(status="identical", commits=[])

            merge_base = proj.repository_merge_base([base_sha, head_sha])['id']
            if merge_base == head_sha:
                return Comparison(status="behind", commits=[])
            if merge_base != base_sha:
                return Comparison(status="diverged", commits=[])

            diff = proj.repository_compare(base_sha, head_sha)
            return Comparison(status="ahead", commits=[c['id'] for c in diff.get('commits', [])])
        except (gitlab.GitlabError, requests.RequestException) as e:
            raise self._fail(f"comparing {base}...{head}", e) from e

    def pull_requests_for_commit(self, sha: str) -> List[PullRequest]:
        """List merge requests associated with a commit."""
        try:
            proj = self._get_project()
            commit = proj.commits.get(sha, lazy=True)
            return [to_pull_request(mr) for mr in commit.merge_requests()]
        except (gitlab.GitlabError, requests.RequestException) as e:
            raise self._fail(f"listing merge requests for commit {sha}", e) from e

    def pull_request_detail(self, number: int) -> PullRequest:
        """Get a merge request by IID."""
        try:
            proj = self._get_project()
            mr = proj.mergerequests.get(number)
            return to_pull_request(mr.attributes)
        except (gitlab.GitlabError, requests.RequestException) as e:
            raise self._fail(f"getting merge request {number}", e) from e

    def list_comments(self, issue: int) -> List[Comment]:
        """List user notes on a merge request; system notes are skipped."""
        try:
            proj = self._get_project()
            mr = proj.mergerequests.get(issue, lazy=True)
            notes = mr.notes.list(get_all=True, per_page=100)
            return [
                Comment(id=note.id, body=note.body or '')
                for note in notes
                if not getattr(note, 'system', False)
            ]
        except (gitlab.GitlabError, requests.RequestException) as e:
            raise self._fail(f"listing notes of merge request {issue}", e) from e

    def create_comment(self, issue: int, body: str) -> Comment:
        try:
            proj = self._get_project()
            mr = proj.mergerequests.get(issue, lazy=True)
            note = mr.notes.create({'body': body})
            return Comment(id=note.id, body=note.body or body)
        except (gitlab.GitlabError, requests.RequestException) as e:
            raise self._fail(f"creating note on merge request {issue}", e) from e

    def update_comment(self, issue: int, comment_id: int, body: str) -> None:
        try:
            proj = self._get_project()
            mr = proj.mergerequests.get(issue, lazy=True)
            mr.notes.update(comment_id, {'body': body})
        except (gitlab.GitlabError, requests.RequestException) as e:
            raise self._fail(f"updating note {comment_id}", e) from e
