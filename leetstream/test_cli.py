from __future__ import annotations

from pathlib import Path

import pytest

from leetstream import cli
from leetstream.search.types import SearchDescriptor, StreamRecord


def test_ui_info_and_error_emit_prefixed_messages(monkeypatch: pytest.MonkeyPatch) -> None:
    lines: list[str] = []
    monkeypatch.setattr(cli.console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))

    cli._ui_info("hello")
    cli._ui_error("boom")

    assert lines == ["[cyan][INFO][/cyan] hello", "[red][ERROR][/red] boom"]


def test_format_helpers() -> None:
    assert cli._format_elapsed_runtime(12.34) == "12.3s"
    assert cli._format_elapsed_runtime(90) == "1.5m"
    assert cli._shorten("abc", limit=10) == "abc"
    assert cli._shorten("magnet:?xt=urn:btih:0123456789", limit=12) == "magnet:?x..."


def test_resolve_config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert cli.resolve_config_path(None) is None

    (tmp_path / "config.toml").write_text("[omdb]\n", encoding="utf-8")
    assert cli.resolve_config_path(None) == tmp_path / "config.toml"
    assert cli.resolve_config_path(str(tmp_path)) == tmp_path / "config.toml"
    assert cli.resolve_config_path(str(tmp_path / "other.toml")) == tmp_path / "other.toml"


def test_display_helpers_report_empty_results(monkeypatch: pytest.MonkeyPatch) -> None:
    lines: list[str] = []
    monkeypatch.setattr(cli.console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))

    cli.display_plan("kitsu:1", SearchDescriptor.unresolvable())
    cli.display_streams("tt1", [])

    assert lines == [
        "[cyan][INFO][/cyan] No search query could be built for kitsu:1",
        "[cyan][INFO][/cyan] No streams found for tt1",
    ]


def test_display_streams_renders_table(monkeypatch: pytest.MonkeyPatch) -> None:
    printed: list[object] = []
    monkeypatch.setattr(cli.console, "print", lambda obj, *_args, **_kwargs: printed.append(obj))

    cli.display_streams("tt1", [StreamRecord("1337x\n1080p", "Movie\n💾 1 GB 🌱 3", "magnet:?xt=urn:btih:a")])

    assert len(printed) == 1
    assert printed[0].row_count == 1


def test_main_without_identifier_shows_help(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])

    assert exc_info.value.code == 0
    assert "leetstream v" in capsys.readouterr().out


def test_main_runs_identifier_with_flags(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OMDB_API_KEY", raising=False)
    calls: list[tuple] = []

    async def _fake_run(config, identifier, *, content_type, plan_only, as_json):
        calls.append((identifier, content_type, plan_only, as_json))

    monkeypatch.setattr(cli, "run_identifier", _fake_run)
    monkeypatch.setattr(cli, "set_logger", lambda _logger: None)

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--plan", "--json", "-t", "series", "tt0944947:1:1"])

    assert exc_info.value.code == 0
    assert calls == [("tt0944947:1:1", "series", True, True)]


def test_main_reports_fatal_errors(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    lines: list[str] = []

    async def _failing_run(*_args, **_kwargs):
        raise RuntimeError("index unreachable")

    monkeypatch.setattr(cli, "run_identifier", _failing_run)
    monkeypatch.setattr(cli, "set_logger", lambda _logger: None)
    monkeypatch.setattr(cli.console, "print", lambda msg, *_args, **_kwargs: lines.append(str(msg)))

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["tt0133093"])

    assert exc_info.value.code == 1
    assert lines[-1] == "[red][ERROR][/red] Fatal error: index unreachable"
