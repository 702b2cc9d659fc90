"""Tests for human and JSON output."""

import json

import pytest
import typer

from secret_item.output import Output


def test_step_printed_in_human_mode(capsys: pytest.CaptureFixture[str]) -> None:
    """Progress lines are shown to humans."""
    Output(json_mode=False).print_step("Unlocking collection")
    assert capsys.readouterr().out == "Unlocking collection\n"


def test_step_silent_in_json_mode(capsys: pytest.CaptureFixture[str]) -> None:
    """Progress lines are suppressed in JSON mode."""
    Output(json_mode=True).print_step("Unlocking collection")
    assert capsys.readouterr().out == ""


def test_no_collection_json(capsys: pytest.CaptureFixture[str]) -> None:
    """A missing alias is a successful envelope with a null collection."""
    Output(json_mode=True).print_no_collection("default")
    assert json.loads(capsys.readouterr().out) == {"ok": True, "data": {"alias": "default", "collection": None}}


def test_error_exits_with_code_1(capsys: pytest.CaptureFixture[str]) -> None:
    """Errors go to stderr and exit with code 1."""
    with pytest.raises(typer.Exit) as exc_info:
        Output(json_mode=False).print_error_and_exit("prompt_timeout", "Prompt did not complete within 5.0s.")
    assert exc_info.value.exit_code == 1
    assert capsys.readouterr().err == "Error: Prompt did not complete within 5.0s.\n"


def test_unlocked_dismissed(capsys: pytest.CaptureFixture[str]) -> None:
    """A dismissed unlock prompt is reported as such."""
    Output(json_mode=True).print_unlocked("/c", dismissed=True)
    assert json.loads(capsys.readouterr().out)["data"] == {"collection": "/c", "dismissed": True}
