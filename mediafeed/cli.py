#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence, TextIO

import orjson

from .config import AppConfig, load_config
from .errors import ConfigError
from .feed.aggregator import Aggregator
from .feed.auth import Authenticator
from .feed.models import Credentials, FeedRequest, FeedResult, Sort, StopReason, TimeFilter
from .feed.paginator import Paginator
from .logging_config import configure_logging
from .provider.reddit_http import RedditHttpProvider

LOGGER = logging.getLogger(__name__)
STALL_QUESTION = "No image posts found after 3 attempts. Continue fetching? [y/N] "


def build_parser(config: AppConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collect image posts from a subreddit listing")
    parser.add_argument(
        "source",
        nargs="?",
        default=config.feed.default_source,
        help="Subreddit or multireddit, e.g. pics or pics+aww",
    )
    parser.add_argument("--sort", default=config.feed.default_sort, choices=[s.value for s in Sort])
    parser.add_argument(
        "--time",
        dest="time_filter",
        default=None,
        choices=[t.value for t in TimeFilter],
        help="Time window, only used with --sort top (default: day)",
    )
    parser.add_argument("--limit", default=config.feed.default_limit, help="Number of image posts to collect (1-100)")
    parser.add_argument("--client-id", default=config.reddit.client_id, help="Defaults to REDDIT_CLIENT_ID")
    parser.add_argument("--client-secret", default=config.reddit.client_secret, help="Defaults to REDDIT_CLIENT_SECRET")
    parser.add_argument("--out-json", default=None, help="Write results to this file instead of stdout")
    parser.add_argument("--yes", action="store_true", help="Keep fetching when no image posts turn up")
    parser.add_argument("--log-level", default=config.logging.level)
    return parser


class ConsoleStatus:
    def __init__(self, stream: TextIO = sys.stderr) -> None:
        self._stream = stream

    def __call__(self, message: str, is_error: bool = False) -> None:
        prefix = "[error]" if is_error else "[status]"
        print(f"{prefix} {message}", file=self._stream, flush=True)


def make_stall_prompt(assume_yes: bool, stdin: TextIO = sys.stdin, stream: TextIO = sys.stderr):
    def decide() -> bool:
        if assume_yes:
            return True
        if not stdin.isatty():
            return False
        print(STALL_QUESTION, end="", file=stream, flush=True)
        answer = stdin.readline()
        return answer.strip().lower() in {"y", "yes"}

    return decide


def render_result(request: FeedRequest, result: FeedResult) -> bytes:
    payload = {
        "source": request.source,
        "sort": request.sort.value,
        "time_filter": request.time_filter.value if request.time_filter else None,
        "limit": request.limit,
        "stop_reason": result.stop_reason.value,
        "requests": result.requests,
        "media": [item.to_dict() for item in result.media],
        "non_media": [item.to_dict() for item in result.non_media],
    }
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2)


async def run(args: argparse.Namespace, config: AppConfig) -> FeedResult:
    credentials = Credentials.build(args.client_id, args.client_secret)
    request = FeedRequest.build(args.source, args.sort, args.limit, args.time_filter)
    provider = RedditHttpProvider(config.reddit)
    aggregator = Aggregator(
        authenticator=Authenticator(provider),
        paginator=Paginator(
            provider,
            rate_limit_seconds=config.feed.rate_limit_seconds,
            stall_extension=config.feed.stall_extension,
        ),
    )
    try:
        result = await aggregator.fetch(
            credentials,
            request,
            on_status=ConsoleStatus(),
            on_stall=make_stall_prompt(args.yes),
        )
    finally:
        await provider.shutdown()

    data = render_result(request, result)
    if args.out_json:
        out_path = Path(args.out_json)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(data)
        print(f"[OK] {len(result.media)} image posts -> {out_path}", file=sys.stderr)
    else:
        sys.stdout.buffer.write(data + b"\n")
        sys.stdout.flush()
    return result


def main(argv: Sequence[str] | None = None) -> int:
    config = load_config()
    args = build_parser(config).parse_args(argv)
    configure_logging(args.log_level, config.logging.timezone)
    try:
        result = asyncio.run(run(args, config))
    except ConfigError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 2
    if result.stop_reason is StopReason.AUTH_FAILED:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
