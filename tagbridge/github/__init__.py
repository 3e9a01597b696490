"""GitHub integration module."""

from .client import GitHubClient

__all__ = ["GitHubClient"]
