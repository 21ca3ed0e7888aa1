from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {value}")


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Invalid float for {name}: {value}")


@dataclass(slots=True)
class RedditConfig:
    client_id: Optional[str]
    client_secret: Optional[str]
    auth_url: str = "https://www.reddit.com/api/v1/access_token"
    api_base: str = "https://oauth.reddit.com"
    user_agent: str = "mediafeed/0.1"
    http_timeout_seconds: int = 10
    verify_ssl: bool = True


@dataclass(slots=True)
class FeedConfig:
    rate_limit_seconds: float = 1.0
    # Extra page requests granted each time the operator chooses to keep going after a stall
    stall_extension: int = 1
    default_source: Optional[str] = None
    default_sort: str = "best"
    default_limit: int = 5


@dataclass(slots=True)
class TelegramConfig:
    token: Optional[str] = None
    stall_timeout_seconds: float = 60.0


@dataclass(slots=True)
class LoggingConfig:
    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    timezone: str = field(default_factory=lambda: os.getenv("TZ", "UTC"))


@dataclass(slots=True)
class AppConfig:
    reddit: RedditConfig
    feed: FeedConfig
    telegram: TelegramConfig
    logging: LoggingConfig


def load_config() -> AppConfig:
    reddit = RedditConfig(
        client_id=os.getenv("REDDIT_CLIENT_ID") or None,
        client_secret=os.getenv("REDDIT_CLIENT_SECRET") or None,
        auth_url=os.getenv("REDDIT_AUTH_URL", "https://www.reddit.com/api/v1/access_token"),
        api_base=os.getenv("REDDIT_API_BASE", "https://oauth.reddit.com").rstrip("/"),
        user_agent=os.getenv("REDDIT_USER_AGENT", "mediafeed/0.1"),
        http_timeout_seconds=_get_int("HTTP_TIMEOUT_SECONDS", 10),
        verify_ssl=_get_bool("HTTP_VERIFY_SSL", True),
    )

    stall_extension = _get_int("FEED_STALL_EXTENSION", 1)
    if stall_extension < 1:
        raise ValueError(f"FEED_STALL_EXTENSION must be positive: {stall_extension}")

    feed = FeedConfig(
        rate_limit_seconds=max(_get_float("FEED_RATE_LIMIT_SECONDS", 1.0), 0.0),
        stall_extension=stall_extension,
        default_source=os.getenv("FEED_DEFAULT_SOURCE") or None,
        default_sort=os.getenv("FEED_DEFAULT_SORT", "best"),
        default_limit=_get_int("FEED_DEFAULT_LIMIT", 5),
    )

    telegram = TelegramConfig(
        token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        stall_timeout_seconds=_get_float("TG_STALL_TIMEOUT_SECONDS", 60.0),
    )

    return AppConfig(reddit=reddit, feed=feed, telegram=telegram, logging=LoggingConfig())
