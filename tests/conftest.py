"""Shared test fixtures for gobuilder.

Provides fake progress reporters, fake toolchain executables, isolated
config environments, and output-state management. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

import pytest

from gobuilder.output import reset_output
from gobuilder.terminal import UI, Status, StepStatus


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and package logger after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    The CLI callback also detaches the ``gobuilder`` logger from the root
    logger, which would hide records from ``caplog`` in later tests.
    """
    yield
    reset_output()
    package_logger = logging.getLogger("gobuilder")
    package_logger.handlers = []
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


# ---------------------------------------------------------------------------
# Fake progress reporter
# ---------------------------------------------------------------------------


class FakeStatus(Status):
    """Records every call so tests can assert on the reporting sequence."""

    def __init__(self) -> None:
        self.updates: list[str] = []
        self.steps: list[tuple[StepStatus, str]] = []
        self.close_count = 0

    def update(self, message: str) -> None:
        self.updates.append(message)

    def step(self, status: StepStatus, message: str) -> None:
        self.steps.append((status, message))

    def close(self) -> None:
        self.close_count += 1


class FakeUI(UI):
    """Hands out :class:`FakeStatus` objects and keeps them for inspection."""

    def __init__(self) -> None:
        self.statuses: list[FakeStatus] = []

    def status(self) -> FakeStatus:
        status = FakeStatus()
        self.statuses.append(status)
        return status

    @property
    def last(self) -> FakeStatus:
        return self.statuses[-1]


@pytest.fixture
def fake_ui() -> FakeUI:
    """A fresh recording UI."""
    return FakeUI()


# ---------------------------------------------------------------------------
# Fake toolchain executables
# ---------------------------------------------------------------------------


def _write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_toolchain(tmp_path: Path) -> Path:
    """A ``go``-like script that records its arguments and creates the ``-o`` file.

    Arguments are written one per line to ``args.txt`` next to the script.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    args_file = bin_dir / "args.txt"
    return _write_script(
        bin_dir / "fake-go",
        f'printf "%s\\n" "$@" > "{args_file}"\n'
        'touch "$3"\n'
        "exit 0\n",
    )


@pytest.fixture
def failing_toolchain(tmp_path: Path) -> Path:
    """A ``go``-like script that prints a compile error and exits 2."""
    bin_dir = tmp_path / "bin-fail"
    bin_dir.mkdir()
    return _write_script(
        bin_dir / "fake-go",
        'echo "main.go:3:1: syntax error: unexpected }" >&2\n'
        "exit 2\n",
    )


@pytest.fixture
def testapp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A ``testapp`` main package inside a Go module rooted at the cwd."""
    (tmp_path / "go.mod").write_text("module example.com/workspace\n\ngo 1.21\n")
    app_dir = tmp_path / "testapp"
    app_dir.mkdir()
    (app_dir / "main.go").write_text(
        'package main\n\nimport "fmt"\n\nfunc main() {\n\tfmt.Println("hello")\n}\n'
    )
    monkeypatch.chdir(tmp_path)
    return app_dir


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, clears all GOBUILDER_*
    environment variables, and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("gobuilder.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [name for name in os.environ if name.startswith("GOBUILDER_")]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path
