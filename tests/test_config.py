"""Tests for gobuilder.config -- decoding, XDG paths, config files, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from gobuilder.config import (
    _atomic_write,
    decode_build_config,
    find_project_config,
    get_config_dir,
    get_data_dir,
    load_global_config,
    load_project_config,
    resolve_build_config,
    resolve_toolchain,
    save_global_config,
    write_project_config,
)
from gobuilder.exceptions import ConfigError
from gobuilder.models import BuildConfig, GlobalConfig, PluginsConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Decode step
# ---------------------------------------------------------------------------


class TestDecodeBuildConfig:
    def test_none_gives_defaults(self) -> None:
        assert decode_build_config(None) == BuildConfig()

    def test_empty_mapping_gives_defaults(self) -> None:
        assert decode_build_config({}) == BuildConfig()

    def test_values(self) -> None:
        cfg = decode_build_config({"source": "./testapp", "output_name": "myapp"})
        assert cfg == BuildConfig(source="./testapp", output_name="myapp")

    def test_not_a_mapping(self) -> None:
        with pytest.raises(ConfigError, match="must be a mapping, got list"):
            decode_build_config(["./"])

    def test_unknown_option(self) -> None:
        with pytest.raises(ConfigError, match="outputname"):
            decode_build_config({"outputname": "x"})

    def test_wrong_type(self) -> None:
        with pytest.raises(ConfigError, match="Invalid build configuration: source"):
            decode_build_config({"source": ["a", "b"]})


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("gobuilder.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
        result = get_config_dir()
        assert result == tmp_path / "cfg" / "gobuilder"
        assert result.is_dir()

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("gobuilder.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".config" / "gobuilder"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("gobuilder.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_data_dir() == tmp_path / ".local" / "share" / "gobuilder"

    def test_non_xdg_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("gobuilder.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".gobuilder"
        assert get_data_dir() == tmp_path / ".gobuilder" / "data"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, '{"a": 1}\n')
        assert target.read_text() == '{"a": 1}\n'

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        _atomic_write(target, "x")
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]

    def test_cleanup_on_failure(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        target.write_text("original")
        with patch("gobuilder.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                _atomic_write(target, "new")
        assert target.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["file.json"]


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_missing_file_gives_defaults(self, isolated_config: Path) -> None:
        assert load_global_config() == GlobalConfig()

    def test_round_trip(self, isolated_config: Path) -> None:
        cfg = GlobalConfig(toolchain="go1.22", plugins=PluginsConfig(disabled=["tinygo"]))
        save_global_config(cfg)
        assert load_global_config() == cfg

    def test_invalid_json(self, isolated_config: Path) -> None:
        path = isolated_config / "config" / "gobuilder" / "config.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_shape(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "config" / "gobuilder" / "config.json",
            {"plugins": {"enabled": "go"}},
        )
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_none_when_absent(self, isolated_config: Path) -> None:
        assert find_project_config() is None
        assert load_project_config() is None

    def test_json(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "gobuilder.json", {"build": {"source": "./cmd"}})
        assert load_project_config() == {"build": {"source": "./cmd"}}

    def test_yaml(self, isolated_config: Path) -> None:
        (isolated_config / "gobuilder.yaml").write_text(
            "build:\n  source: ./cmd/api\n  output_name: api\n"
        )
        assert load_project_config() == {
            "build": {"source": "./cmd/api", "output_name": "api"}
        }

    def test_json_preferred_over_yaml(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "gobuilder.json", {"build": {"source": "json"}})
        (isolated_config / "gobuilder.yml").write_text("build:\n  source: yaml\n")
        assert find_project_config() == isolated_config / "gobuilder.json"

    def test_explicit_path(self, isolated_config: Path) -> None:
        path = isolated_config / "ci" / "build.yml"
        path.parent.mkdir()
        path.write_text("build:\n  output_name: ci-app\n")
        assert load_project_config(path) == {"build": {"output_name": "ci-app"}}

    def test_explicit_path_missing(self, isolated_config: Path) -> None:
        with pytest.raises(ConfigError, match="Config file not found"):
            load_project_config(isolated_config / "missing.json")

    def test_empty_yaml(self, isolated_config: Path) -> None:
        (isolated_config / "gobuilder.yaml").write_text("")
        assert load_project_config() == {}

    def test_malformed_yaml(self, isolated_config: Path) -> None:
        (isolated_config / "gobuilder.yaml").write_text("build: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_top_level_not_mapping(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "gobuilder.json", ["build"])
        with pytest.raises(ConfigError, match="top level must be a mapping"):
            load_project_config()

    def test_write_project_config(self, isolated_config: Path) -> None:
        path = isolated_config / "gobuilder.json"
        write_project_config(path, BuildConfig(source="./testapp", output_name="myapp"))
        assert json.loads(path.read_text()) == {
            "build": {"output_name": "myapp", "source": "./testapp"}
        }

    def test_write_project_config_yaml(self, isolated_config: Path) -> None:
        path = isolated_config / "gobuilder.yaml"
        write_project_config(path, BuildConfig(source="./cmd/api", output_name="api"))
        assert load_project_config(path) == {
            "build": {"output_name": "api", "source": "./cmd/api"}
        }
        assert not path.read_text().lstrip().startswith("{")


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveBuildConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_build_config() == BuildConfig()

    def test_project_file(self, isolated_config: Path) -> None:
        _write_json(
            isolated_config / "gobuilder.json",
            {"build": {"source": "./cmd", "output_name": "svc"}},
        )
        assert resolve_build_config() == BuildConfig(source="./cmd", output_name="svc")

    def test_env_over_project(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(
            isolated_config / "gobuilder.json",
            {"build": {"source": "./cmd", "output_name": "svc"}},
        )
        monkeypatch.setenv("GOBUILDER_OUTPUT_NAME", "from-env")
        cfg = resolve_build_config()
        assert cfg.output_name == "from-env"
        assert cfg.source == "./cmd"

    def test_cli_over_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOBUILDER_SOURCE", "./env-src")
        monkeypatch.setenv("GOBUILDER_OUTPUT_NAME", "env-out")
        cfg = resolve_build_config(cli_source="./cli-src")
        assert cfg.source == "./cli-src"
        assert cfg.output_name == "env-out"

    def test_empty_cli_value_falls_back_to_default(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "gobuilder.json", {"build": {"output_name": "svc"}})
        assert resolve_build_config(cli_output_name="").output_name == "app"

    def test_project_without_build_section(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "gobuilder.json", {"other": 1})
        assert resolve_build_config() == BuildConfig()

    def test_build_section_not_mapping(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "gobuilder.json", {"build": "./cmd"})
        with pytest.raises(ConfigError, match="'build' must be a mapping"):
            resolve_build_config()

    def test_unknown_option_in_project(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "gobuilder.json", {"build": {"tags": ["x"]}})
        with pytest.raises(ConfigError, match="tags"):
            resolve_build_config()

    def test_explicit_config_path(self, isolated_config: Path) -> None:
        path = isolated_config / "alt.json"
        _write_json(path, {"build": {"output_name": "alt"}})
        assert resolve_build_config(config_path=path).output_name == "alt"


class TestResolveToolchain:
    def test_global_default(self, isolated_config: Path) -> None:
        assert resolve_toolchain(GlobalConfig()) == "go"

    def test_global_config_value(self, isolated_config: Path) -> None:
        assert resolve_toolchain(GlobalConfig(toolchain="go1.22")) == "go1.22"

    def test_env_over_global(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOBUILDER_TOOLCHAIN", "/usr/local/go/bin/go")
        assert resolve_toolchain(GlobalConfig(toolchain="go1.22")) == "/usr/local/go/bin/go"

    def test_cli_over_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GOBUILDER_TOOLCHAIN", "/usr/local/go/bin/go")
        assert resolve_toolchain(GlobalConfig(), cli_toolchain="gotip") == "gotip"
