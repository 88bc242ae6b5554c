"""Shared test fixtures."""

from __future__ import annotations

import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

_SPY_SOURCE = """
import json
import os
import sys

log_path, label = sys.argv[1], sys.argv[2]
query = json.loads(sys.stdin.read())
with open(log_path, "a", encoding="utf-8") as handle:
    handle.write(f"{label}:{os.environ.get('TF_EXTERNAL_ACTION', '<absent>')}\\n")
if len(sys.argv) > 3:
    sys.stderr.write(sys.argv[3])
    sys.exit(1)
query["label"] = label
sys.stdout.write(json.dumps(query))
"""


@pytest.fixture()
def echo_program() -> tuple[str, ...]:
    """Program list for the bundled echo program."""

    return (sys.executable, "-m", "tf_external.echo_program")


@pytest.fixture()
def make_program(tmp_path: Path) -> Callable[[str, str], tuple[str, ...]]:
    """Write a Python script and return a program list that runs it."""

    def _make(name: str, source: str) -> tuple[str, ...]:
        path = tmp_path / f"{name}.py"
        path.write_text(textwrap.dedent(source).lstrip(), "utf-8")
        return (sys.executable, str(path))

    return _make


@pytest.fixture()
def spy_log(tmp_path: Path) -> Path:
    """Log file the spy program appends ``label:action`` lines to."""

    return tmp_path / "spy.log"


@pytest.fixture()
def spy_program(make_program, spy_log: Path) -> Callable[..., tuple[str, ...]]:
    """Program list for a spy that records each invocation and echoes its query."""

    script = make_program("spy", _SPY_SOURCE)

    def _spy(label: str, *, fail_with: str | None = None) -> tuple[str, ...]:
        program = (*script, str(spy_log), label)
        if fail_with is not None:
            program = (*program, fail_with)
        return program

    return _spy


@pytest.fixture()
def spy_calls(spy_log: Path) -> Callable[[], list[str]]:
    """Return the recorded spy invocations in order."""

    def _calls() -> list[str]:
        if not spy_log.exists():
            return []
        return spy_log.read_text("utf-8").splitlines()

    return _calls
