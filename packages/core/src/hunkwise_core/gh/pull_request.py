"""GitHub collaborator: PR metadata, diff text and review submission.

PyGithub covers metadata and reviews. It has no public way to fetch the
``application/vnd.github.v3.diff`` media type, so diff text goes through
requests against the REST API directly.
"""

from __future__ import annotations

import logging

import requests
from github import Auth, Github, GithubException

from hunkwise_core.errors import FetchError, SubmissionError
from hunkwise_core.models import PRContext, ReviewCommentRecord

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
_DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
_HTTP_TIMEOUT = 30
REVIEW_EVENT = "COMMENT"


def _describe(e: GithubException) -> str:
    data = e.data if isinstance(e.data, dict) else {}
    return f"{e.status} {data.get('message', str(e))}"


class GitHubPlatform:
    def __init__(self, token: str, base_url: str = DEFAULT_API_URL, session: requests.Session | None = None):
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._github = Github(auth=Auth.Token(token), base_url=self._base_url)
        self._session = session or requests.Session()

    def get_pull(self, owner: str, repo: str, pull_number: int):
        return self._github.get_repo(f"{owner}/{repo}").get_pull(pull_number)

    def get_pr_context(self, owner: str, repo: str, pull_number: int) -> PRContext:
        try:
            pr = self.get_pull(owner, repo, pull_number)
        except GithubException as e:
            raise FetchError(f"Could not fetch PR #{pull_number} in {owner}/{repo}: {_describe(e)}") from e
        return PRContext(
            owner=owner,
            repo=repo,
            pull_number=pull_number,
            title=pr.title or "",
            description=pr.body or "",
        )

    def get_pull_diff(self, owner: str, repo: str, pull_number: int) -> str:
        """Full diff of the PR (base...head)."""
        return self._get_diff(f"/repos/{owner}/{repo}/pulls/{pull_number}")

    def get_compare_diff(self, owner: str, repo: str, base: str, head: str) -> str:
        """Diff between two revisions using GitHub's compare API."""
        return self._get_diff(f"/repos/{owner}/{repo}/compare/{base}...{head}")

    def _get_diff(self, path: str) -> str:
        url = self._base_url + path
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": _DIFF_MEDIA_TYPE,
        }
        try:
            response = self._session.get(url, headers=headers, timeout=_HTTP_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Could not fetch diff from {path}: {e}") from e
        logger.debug("Fetched %d bytes of diff from %s", len(response.text), path)
        return response.text

    def create_review(self, owner: str, repo: str, pull_number: int, comments: list[ReviewCommentRecord]) -> None:
        try:
            pr = self.get_pull(owner, repo, pull_number)
            pr.create_review(event=REVIEW_EVENT, comments=[c.as_dict() for c in comments])
        except GithubException as e:
            raise SubmissionError(
                f"GitHub rejected the review on {owner}/{repo}#{pull_number}: {_describe(e)}"
            ) from e
