from __future__ import annotations

import io
import json

import allure

from tf_external.echo_program import main

pytestmark = [
    allure.epic("Wire Protocol"),
    allure.feature("Echo Program"),
]


def test_echoes_query(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO('{"a": "b"}'))

    assert main([]) == 0
    assert json.loads(capsys.readouterr().out) == {"a": "b"}


def test_adds_action_under_requested_key(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    monkeypatch.setenv("TF_EXTERNAL_ACTION", "delete")

    assert main(["--action-key", "phase"]) == 0
    assert json.loads(capsys.readouterr().out) == {"phase": "delete"}


def test_fail_with_writes_stderr(capsys) -> None:
    assert main(["--fail-with", "boom"]) == 1
    assert capsys.readouterr().err == "boom"
