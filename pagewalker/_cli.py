from __future__ import annotations

import argparse
import logging
from typing import Callable, Optional, Sequence

import anyio

from pagewalker._async_walker import run
from pagewalker._config import Config, load_config, validate_start_url
from pagewalker._core.models import SessionReport, WalkOptions
from pagewalker._driver import SessionCookie
from pagewalker._exceptions import ConfigurationError
from pagewalker._playwright import PlaywrightDriver

__all__ = ("build_parser", "main")

logger = logging.getLogger("pagewalker.cli")

PROMPT = "__prompt__"

EXIT_OK = 0
EXIT_FAILURE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagewalker",
        description="Walk through classroom units by clicking next until something needs a human.",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Show the browser window and log debug output")
    parser.add_argument(
        "-H",
        "--headless-debug",
        action="store_true",
        help="Log debug output but keep the browser headless",
    )
    parser.add_argument("-q", "--quick", action="store_true", help="Jump to the end of each unit instead of scrolling")
    parser.add_argument("-c", "--count", type=int, default=None, help="Stop after this many steps")
    parser.add_argument(
        "-l",
        "--link",
        nargs="?",
        const=PROMPT,
        default=None,
        help="Start link. Without a value, ask for it interactively",
    )
    parser.add_argument("--config", default="config.json", help="Path to the JSON config file (default: %(default)s)")
    return parser


def resolve_start_url(link: Optional[str], config: Config, ask: Callable[[str], str] = input) -> str:
    if link == PROMPT:
        link = ask("Start link: ")
    url = link or config.get("start_url", "")
    if not url:
        raise ConfigurationError("No start link given and none configured")
    return validate_start_url(url, config.get("allowed_host", ""))


def build_options(args: argparse.Namespace, config: Config) -> WalkOptions:
    if args.count is not None and args.count < 0:
        raise ConfigurationError(f"Step count must not be negative, got {args.count}")
    return WalkOptions(
        step_limit=args.count,
        trusted_asset_host_suffix=config.get("trusted_asset_host_suffix", "cloudfront.net"),
        smooth_scroll=not args.quick,
        timeout=config.get("timeout", 30.0),
    )


async def walk(start_url: str, config: Config, options: WalkOptions, headless: bool) -> SessionReport:
    async with PlaywrightDriver.open(
        executable_path=config.get("chrome_path") or None,
        headless=headless,
        timeout=options.timeout,
    ) as driver:
        session_cookie = config.get("session_cookie", "")
        if session_cookie:
            await driver.bootstrap_session(
                SessionCookie(
                    name=config.get("cookie_name", "laravel_session"),
                    value=session_cookie,
                    domain=config.get("cookie_domain", "www.dicoding.com"),
                )
            )
        else:
            await driver.clear_cookies()
            logger.warning("No session cookie configured, the walk will most likely stop at the auth check")

        return await run(driver, start_url, options)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug or args.headless_debug else logging.INFO,
        format="%(levelname)-7s %(message)s",
    )

    try:
        config = load_config(args.config)
        start_url = resolve_start_url(args.link, config)
        options = build_options(args, config)
    except ConfigurationError as exc:
        logger.error(str(exc))
        return EXIT_FAILURE

    headless = not args.debug or args.headless_debug

    try:
        report = anyio.run(walk, start_url, config, options, headless)
    except KeyboardInterrupt:
        logger.warning("Interrupted, browser closed")
        return EXIT_INTERRUPTED
    except Exception:
        logger.exception("An error occurred")
        return EXIT_FAILURE

    print(f"\nLast link: {report.last_visited_location}")
    return EXIT_FAILURE if report.failed else EXIT_OK
