import typing as tp
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

from pagewalker import SessionReport, WalkOptions
from pagewalker import _cli
from pagewalker._cli import PROMPT, build_options, build_parser, main, resolve_start_url, walk
from pagewalker._config import get_default_config
from pagewalker._exceptions import ConfigurationError
from pagewalker._mock import MockDriver, MockPage

START = "https://www.dicoding.com/academies/86/tutorials/1"


@pytest.fixture
def no_config(tmp_path: Path) -> str:
    return str(tmp_path / "config.json")


def fake_walk(report: SessionReport) -> tp.Callable[..., tp.Awaitable[SessionReport]]:
    async def walk(*args: tp.Any) -> SessionReport:
        return report

    return walk


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args([])

        assert not args.debug
        assert not args.headless_debug
        assert not args.quick
        assert args.count is None
        assert args.link is None
        assert args.config == "config.json"

    def test_short_flags_with_equals(self) -> None:
        args = build_parser().parse_args(["-q", "-c=3", f"-l={START}"])

        assert args.quick
        assert args.count == 3
        assert args.link == START

    def test_link_without_value_prompts(self) -> None:
        args = build_parser().parse_args(["-l"])

        assert args.link == PROMPT


class TestResolution:
    def test_prompted_link(self) -> None:
        prompts: list[str] = []

        def ask(prompt: str) -> str:
            prompts.append(prompt)
            return f" {START} "

        assert resolve_start_url(PROMPT, get_default_config(), ask=ask) == START
        assert prompts == ["Start link: "]

    def test_configured_link_is_the_fallback(self) -> None:
        config = get_default_config()
        config["start_url"] = START

        assert resolve_start_url(None, config) == START

    def test_no_link_at_all(self) -> None:
        config = get_default_config()
        config["start_url"] = ""

        with pytest.raises(ConfigurationError, match="No start link"):
            resolve_start_url(None, config)

    def test_options_from_flags(self) -> None:
        options = build_options(build_parser().parse_args(["-q", "-c", "7"]), get_default_config())

        assert options.step_limit == 7
        assert not options.smooth_scroll


class TestMain:
    def test_invalid_link_exits_without_browser(self, no_config: str, monkeypatch: pytest.MonkeyPatch) -> None:
        launched: list[bool] = []

        async def walk(*args: tp.Any) -> SessionReport:
            launched.append(True)
            raise AssertionError("browser must not be launched")

        monkeypatch.setattr(_cli, "walk", walk)

        assert main(["-l", "not a link", "--config", no_config]) == 2
        assert launched == []

    def test_negative_count_exits(self, no_config: str) -> None:
        assert main(["-l", START, "-c", "-1", "--config", no_config]) == 2

    def test_guard_stop_exits_cleanly(
        self, no_config: str, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        report = SessionReport(last_visited_location=START, step_count=0, stop_reason="is_exam")
        monkeypatch.setattr(_cli, "walk", fake_walk(report))

        assert main(["-l", START, "--config", no_config]) == 0
        assert capsys.readouterr().out == f"\nLast link: {START}\n"

    def test_failed_walk_exits_with_error(self, no_config: str, monkeypatch: pytest.MonkeyPatch) -> None:
        report = SessionReport(last_visited_location=START, step_count=2, stop_reason="failure", error=TimeoutError())
        monkeypatch.setattr(_cli, "walk", fake_walk(report))

        assert main(["-l", START, "--config", no_config]) == 2

    def test_unexpected_error_exits_with_error(self, no_config: str, monkeypatch: pytest.MonkeyPatch) -> None:
        async def walk(*args: tp.Any) -> SessionReport:
            raise RuntimeError("Browser crashed")

        monkeypatch.setattr(_cli, "walk", walk)

        assert main(["-l", START, "--config", no_config]) == 2


class TestWalk:
    @pytest.mark.anyio
    async def test_session_cookie_is_injected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        driver = MockDriver(pages=[MockPage(url=START, is_exam=True)])
        opened: list[dict[str, tp.Any]] = []

        @asynccontextmanager
        async def open(**kwargs: tp.Any) -> tp.AsyncIterator[MockDriver]:
            opened.append(kwargs)
            yield driver

        monkeypatch.setattr(_cli.PlaywrightDriver, "open", open)
        config = get_default_config()
        config["session_cookie"] = "eyJpdiI6"
        config["chrome_path"] = ""

        report = await walk(START, config, WalkOptions(timeout=5), True)

        assert report.stop_reason == "is_exam"
        assert opened == [{"executable_path": None, "headless": True, "timeout": 5}]
        assert [(cookie.name, cookie.value, cookie.domain) for cookie in driver.cookies] == [
            ("laravel_session", "eyJpdiI6", config["cookie_domain"])
        ]
