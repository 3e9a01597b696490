"""GitLab integration module."""

from .client import GitLabClient

__all__ = ["GitLabClient"]
