from __future__ import annotations

import pytest

from leetstream import config as ls_config


def test_load_config_without_path_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OMDB_API_KEY", raising=False)

    config = ls_config.load_config(None)

    assert config.index.base_url == "https://1337x.to"
    assert config.index.max_results == 20
    assert config.search.request_timeout == 10.0
    assert config.search.link_lookup_limit == 10
    assert config.search.max_per_resolution == 3
    assert config.search.cache_ttl_seconds == 3600.0
    assert config.omdb.api_key == ""
    assert config.config_path is None


def test_load_config_reads_toml_sections(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OMDB_API_KEY", raising=False)
    path = tmp_path / "config.toml"
    path.write_text(
        '[omdb]\napi_key = "abc123"\n\n'
        '[index]\nbase_url = "https://1337x.st"\nmax_results = 5\n\n'
        "[search]\nmax_per_resolution = 2\ncache_ttl_seconds = 0\n",
        encoding="utf-8",
    )

    config = ls_config.load_config(path)

    assert config.omdb.api_key == "abc123"
    assert config.index.base_url == "https://1337x.st"
    assert config.index.max_results == 5
    assert config.search.max_per_resolution == 2
    assert config.search.cache_ttl_seconds == 0
    assert config.config_path == path


def test_environment_fills_missing_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OMDB_API_KEY", "from-env")

    config = ls_config.load_config(None)

    assert config.omdb.api_key == "from-env"


def test_missing_config_file_exits(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ls_config.console, "print", lambda *_args, **_kwargs: None)

    with pytest.raises(SystemExit) as excinfo:
        ls_config.load_config(tmp_path / "missing.toml")

    assert excinfo.value.code == 1


def test_invalid_config_value_exits(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ls_config.console, "print", lambda *_args, **_kwargs: None)
    path = tmp_path / "config.toml"
    path.write_text("[search]\nmax_per_resolution = 0\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        ls_config.load_config(path)

    assert excinfo.value.code == 1
