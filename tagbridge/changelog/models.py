"""Records exchanged between the platform clients and the changelog pipeline."""

from typing import List, Literal, Optional

from pydantic import BaseModel


UNKNOWN_AUTHOR = "unknown"


class Tag(BaseModel):
    name: str

    class Config:
        frozen = True


class Comparison(BaseModel):
    """Result of comparing a base ref with a head commit."""

    status: Literal["ahead", "behind", "identical", "diverged"]
    commits: List[str] = []

    @property
    def head_contains_base(self) -> bool:
        """True when the base is an ancestor of, or identical to, the head."""
        return self.status in ("ahead", "identical")


class Author(BaseModel):
    login: str
    avatar_url: Optional[str] = None
    profile_url: Optional[str] = None


class PullRequest(BaseModel):
    """A pull (or merge) request as seen by the changelog.

    ``merged_at`` keeps the platform's raw timestamp; it is only parsed for
    ordering.
    """

    number: int
    title: str
    merged_at: Optional[str] = None
    base_ref: str = ""
    head_ref: Optional[str] = None
    author: Optional[Author] = None
    url: str = ""
    labels: List[str] = []

    @property
    def is_merged(self) -> bool:
        return bool(self.merged_at)

    @property
    def author_login(self) -> str:
        if self.author and self.author.login:
            return self.author.login
        return UNKNOWN_AUTHOR


class Comment(BaseModel):
    id: int
    body: str = ""


class ChangelogResult(BaseModel):
    """Outputs of a changelog run."""

    body: str = ""
    prev_tag: str = ""
    count: int = 0

    def outputs(self) -> dict:
        return {"body": self.body, "prev_tag": self.prev_tag, "count": self.count}
