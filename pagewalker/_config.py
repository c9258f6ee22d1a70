from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, TypedDict, Union
from urllib.parse import urlsplit

from pagewalker._exceptions import ConfigurationError

__all__ = ("Config", "get_default_config", "load_config", "validate_start_url")

logger = logging.getLogger("pagewalker.config")


class Config(TypedDict, total=False):
    # override default value with the environment variable PAGEWALKER_START_URL
    start_url: str
    """
    The unit the walk starts from when no link is given on the command line.
    """

    # override default value with the environment variable PAGEWALKER_CHROME_PATH
    chrome_path: str
    """
    Path to the Chrome/Chromium executable. Empty means Playwright's bundled Chromium.
    """

    # override default value with the environment variable PAGEWALKER_SESSION_COOKIE
    session_cookie: str
    """
    Value of the session cookie injected before the first navigation.
    """

    # override default value with the environment variable PAGEWALKER_COOKIE_NAME
    cookie_name: str

    # override default value with the environment variable PAGEWALKER_COOKIE_DOMAIN
    cookie_domain: str

    # override default value with the environment variable PAGEWALKER_TRUSTED_ASSET_HOST_SUFFIX
    trusted_asset_host_suffix: str
    """
    Hosts ending with this suffix are never blocked by the asset policy.
    """

    # override default value with the environment variable PAGEWALKER_ALLOWED_HOST
    allowed_host: str
    """
    Start links whose host does not contain this string are rejected. Empty disables the check.
    """

    # seconds
    # override default value with the environment variable PAGEWALKER_TIMEOUT
    timeout: float
    """
    Upper bound of every navigation and element wait, in seconds.
    """


# Keys of the original config.json layout
_ALIASES = {
    "start_link": "start_url",
    "laravel_session": "session_cookie",
}


def get_default_config() -> Config:
    """Get the default configuration, honouring ``PAGEWALKER_*`` environment variables."""

    START_URL = os.getenv("PAGEWALKER_START_URL", "")
    CHROME_PATH = os.getenv("PAGEWALKER_CHROME_PATH", "")
    SESSION_COOKIE = os.getenv("PAGEWALKER_SESSION_COOKIE", "")
    COOKIE_NAME = os.getenv("PAGEWALKER_COOKIE_NAME", "laravel_session")
    COOKIE_DOMAIN = os.getenv("PAGEWALKER_COOKIE_DOMAIN", "www.dicoding.com")
    TRUSTED_ASSET_HOST_SUFFIX = os.getenv("PAGEWALKER_TRUSTED_ASSET_HOST_SUFFIX", "cloudfront.net")
    ALLOWED_HOST = os.getenv("PAGEWALKER_ALLOWED_HOST", "dicoding")
    TIMEOUT = float(os.getenv("PAGEWALKER_TIMEOUT", "30"))

    return {
        "start_url": START_URL,
        "chrome_path": CHROME_PATH,
        "session_cookie": SESSION_COOKIE,
        "cookie_name": COOKIE_NAME,
        "cookie_domain": COOKIE_DOMAIN,
        "trusted_asset_host_suffix": TRUSTED_ASSET_HOST_SUFFIX,
        "allowed_host": ALLOWED_HOST,
        "timeout": TIMEOUT,
    }


def load_config(path: Optional[Union[str, Path]] = None) -> Config:
    """
    Load the defaults and overlay them with a JSON config file.

    A missing file is not an error; the defaults are returned as they are.
    Unknown keys are ignored.

    Raises:
        ConfigurationError: If the file exists but is not a JSON object.
    """
    config = get_default_config()
    if path is None:
        return config

    path = Path(path)
    if not path.is_file():
        logger.debug(f"No config file at {path}, using defaults")
        return config

    try:
        with open(path, encoding="utf-8") as f:
            raw: Any = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")

    overrides: Dict[str, Any] = {}
    for key, value in raw.items():
        key = _ALIASES.get(key, key)
        if key not in Config.__annotations__:
            logger.debug(f"Ignoring unknown config key {key!r}")
            continue
        overrides[key] = value

    if "timeout" in overrides:
        try:
            overrides["timeout"] = float(overrides["timeout"])
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid timeout in {path}: {overrides['timeout']!r}") from exc

    config.update(overrides)  # type: ignore[typeddict-item]
    return config


def validate_start_url(url: str, allowed_host: str = "") -> str:
    """
    Check that ``url`` is an absolute http(s) address, optionally on an expected host.

    Examples:
        >>> validate_start_url("https://www.dicoding.com/academies/1/tutorials/2", "dicoding")
        'https://www.dicoding.com/academies/1/tutorials/2'
    """
    parts = urlsplit(url.strip())
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise ConfigurationError(f"Start link {url!r} is not a valid http(s) URL")
    if allowed_host and allowed_host not in parts.hostname:
        raise ConfigurationError(f"Start link {url!r} does not point to {allowed_host!r}")
    return url.strip()
