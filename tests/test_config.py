"""
Tests for configuration loading: default root file and environment overrides.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from signpost import config
from signpost.scheduler import DEFAULT_DEBOUNCE_MS


def test_default_root_falls_back_to_home_without_config(tmp_path: Path):
    assert config.load_default_root(tmp_path / "missing.cfg") == Path.home()


def test_default_root_reads_configured_directory(tmp_path: Path):
    root = tmp_path / "workspace"
    root.mkdir()
    cfg = tmp_path / config.CONFIG_FILE_NAME
    cfg.write_text(f"  {root}  \n", encoding="utf-8")

    assert config.load_default_root(cfg) == root.resolve()


@pytest.mark.parametrize("content", ["", "\n", "/definitely/not/a/dir\n"])
def test_default_root_ignores_empty_or_invalid_config(tmp_path: Path, content: str):
    cfg = tmp_path / config.CONFIG_FILE_NAME
    cfg.write_text(content, encoding="utf-8")

    assert config.load_default_root(cfg) == Path.home()


def test_persist_root_round_trips(tmp_path: Path):
    root = tmp_path / "workspace"
    root.mkdir()
    cfg = tmp_path / config.CONFIG_FILE_NAME

    assert config.persist_root(root, cfg) is True
    assert config.load_default_root(cfg) == root.resolve()


def test_persist_root_reports_failure(tmp_path: Path):
    cfg = tmp_path / "no-such-dir" / config.CONFIG_FILE_NAME

    assert config.persist_root(tmp_path, cfg) is False


def test_config_file_lives_in_home():
    assert config.config_file_path() == Path.home() / ".signpost.cfg"


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({}, DEFAULT_DEBOUNCE_MS),
        ({"SIGNPOST_DEBOUNCE_MS": "250"}, 250),
        ({"SIGNPOST_DEBOUNCE_MS": " 0 "}, 0),
        ({"SIGNPOST_DEBOUNCE_MS": "fast"}, DEFAULT_DEBOUNCE_MS),
        ({"SIGNPOST_DEBOUNCE_MS": "-1"}, DEFAULT_DEBOUNCE_MS),
    ],
)
def test_debounce_from_env(environ, expected):
    assert config.debounce_ms_from_env(environ) == expected


def test_editor_command_defaults_to_code():
    assert config.editor_command({}) == ["code"]


def test_editor_command_is_shell_split():
    environ = {"SIGNPOST_EDITOR": "gvim --remote-tab 'x y'"}

    assert config.editor_command(environ) == ["gvim", "--remote-tab", "x y"]


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({}, "WARNING"),
        ({"SIGNPOST_LOG_LEVEL": "debug"}, "DEBUG"),
        ({"SIGNPOST_LOG_LEVEL": "chatty"}, "WARNING"),
    ],
)
def test_log_level_from_env(environ, expected):
    assert config.log_level_from_env(environ) == expected
