from __future__ import annotations


class FeedError(Exception):
    """Base class for failures reported by the feed pipeline."""


class AuthError(FeedError):
    pass


class FetchError(FeedError):
    pass


class ConfigError(FeedError):
    """Invalid user input or environment configuration."""
