"""Tagbridge - changelog previews for release branches."""

__version__ = "0.3.0"
