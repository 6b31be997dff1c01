"""Unit tests for the `ballot` CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import ADMIN, OUTSIDER, VOTER_A, VOTER_B

from ballot_workflow.main import main


def _run(capsys: pytest.CaptureFixture[str], *argv: str) -> tuple[int, str, str]:
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def test_full_ballot_through_the_cli(
    ballot_env: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    steps = [
        ("register-voter", VOTER_A),
        ("register-voter", VOTER_B),
        ("open-proposals",),
        ("--as", VOTER_A, "submit-proposal", "Proposal 1"),
        ("--as", VOTER_B, "submit-proposal", "Proposal 2"),
        ("close-proposals",),
        ("open-voting",),
        ("--as", VOTER_A, "vote", "1"),
        ("--as", VOTER_B, "vote", "2"),
        ("close-voting",),
    ]
    for step in steps:
        code, _out, err = _run(capsys, *step)
        assert code == 0, err

    code, out, _err = _run(capsys, "tally")
    assert code == 0
    assert "Winning proposal: 1" in out

    state = json.loads(ballot_env.read_text(encoding="utf-8"))
    assert state["status"] == 5
    assert state["winning_proposal_id"] == 1
    assert state["voters"][VOTER_A]["voted_proposal_id"] == 1

    code, out, _err = _run(capsys, "status")
    assert code == 0
    assert "VotesTallied (5)" in out


def test_rejected_operation_exits_3_and_keeps_state(
    ballot_env: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(capsys, "register-voter", VOTER_A)[0] == 0
    before = ballot_env.read_text(encoding="utf-8")

    code, _out, err = _run(capsys, "register-voter", VOTER_A)
    assert code == 3
    assert "already registered" in err

    code, _out, err = _run(capsys, "--as", OUTSIDER, "open-proposals")
    assert code == 3
    assert "not the administrator" in err

    assert ballot_env.read_text(encoding="utf-8") == before


def test_wrong_phase_names_required_phase(
    ballot_env: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _run(capsys, "register-voter", VOTER_A)

    code, _out, err = _run(capsys, "--as", VOTER_A, "vote", "1")
    assert code == 3
    assert "VotingSessionStarted" in err


def test_show_commands_are_voter_only(
    ballot_env: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _run(capsys, "register-voter", VOTER_A)
    _run(capsys, "open-proposals")

    code, out, _err = _run(capsys, "--as", VOTER_A, "show-proposal", "0")
    assert code == 0
    assert '"description": "GENESIS"' in out

    code, out, _err = _run(capsys, "--as", VOTER_A, "show-voter", VOTER_A)
    assert code == 0
    assert '"has_voted": false' in out

    code, _out, err = _run(capsys, "show-voter", VOTER_A)
    assert code == 3
    assert "not a registered voter" in err


def test_missing_administrator_is_a_configuration_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("BALLOT_ADMINISTRATOR", raising=False)
    monkeypatch.chdir(tmp_path)

    code, _out, err = _run(capsys, "status")
    assert code == 2
    assert "Configuration error" in err


def test_default_caller_is_the_administrator(
    ballot_env: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code, out, _err = _run(capsys, "register-voter", ADMIN)
    assert code == 0
    assert f"Registered voter {ADMIN}" in out


@pytest.mark.parametrize("blank", ["", "   "])
def test_blank_caller_is_rejected(
    ballot_env: Path, capsys: pytest.CaptureFixture[str], blank: str
) -> None:
    code, out, err = _run(capsys, "--as", blank, "register-voter", OUTSIDER)
    assert code == 2
    assert "non-blank identity" in err
    assert "Registered voter" not in out
    assert not ballot_env.exists()
