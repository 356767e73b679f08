from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from tictactoe_ai.cli import main


def _run_cli(args: list[str], cwd: Path, stdin: str | None = None) -> subprocess.CompletedProcess:
    exe = [sys.executable, "-m", "tictactoe_ai.cli"]
    return subprocess.run(exe + args, cwd=cwd, capture_output=True, text=True, input=stdin)


def test_cli_evaluate_and_move(tmp_path: Path):
    r = _run_cli(["evaluate", "--board", "XOXOXO..X"], cwd=tmp_path)
    assert r.returncode == 0
    s = r.stdout + r.stderr
    assert "status=win" in s and "winner=X" in s and "line=[0, 4, 8]" in s

    r = _run_cli(["move", "--board", "110020000", "--fallback", "0"], cwd=tmp_path)
    assert r.returncode == 0
    s = r.stdout + r.stderr
    assert "ai=O move=2" in s
    assert "scores=" in s and "blocks=[2]" in s


def test_cli_move_stdin_streams_csv(tmp_path: Path):
    boards = "110020000\nnot-a-board\n111220000\n000000000\n"
    r = _run_cli(["move", "--stdin", "--fallback", "0"], cwd=tmp_path, stdin=boards)
    assert r.returncode == 0
    lines = r.stdout.strip().splitlines()
    assert lines[0] == "board,ai,move"
    # invalid and terminal boards are skipped
    assert lines[1:] == ["110020000,O,2", "000000000,X,0"]


def test_cli_evaluate_stdin(tmp_path: Path):
    r = _run_cli(["evaluate", "--stdin"], cwd=tmp_path, stdin="XXX.OO...\nXOXXOOOXX\n")
    assert r.returncode == 0
    lines = r.stdout.strip().splitlines()
    assert lines == ["board,status,winner,line", "XXX.OO...,win,X,0 1 2", "XOXXOOOXX,draw,-,"]


@pytest.mark.parametrize("bad", ["abc", "012345678", "0123456789", "12345678x"])
def test_cli_error_invalid_boards(bad: str):
    assert main(["evaluate", "--board", bad]) == 2
    assert main(["move", "--board", bad]) == 2


def test_cli_error_unreachable_and_terminal_boards():
    assert main(["move", "--board", "111222111"]) == 2
    assert main(["move", "--board", "111220000"]) == 2


def test_cli_bad_fallback_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TTT_RANDOM_FALLBACK", "lots")
    assert main(["move", "--board", "100000000"]) == 2


def test_cli_play_game_until_quit(tmp_path: Path):
    r = _run_cli(["play", "--fallback", "0"], cwd=tmp_path, stdin="0\n0\nfoo\nq\n")
    assert r.returncode == 0
    assert "Computer plays 4" in r.stdout
    assert "already occupied" in r.stdout
    assert "Invalid cell" in r.stdout


def test_cli_play_to_the_end(tmp_path: Path):
    # perfect computer against a fixed sequence; game must finish without a human win
    r = _run_cli(["play", "--fallback", "0"], cwd=tmp_path, stdin="0\n8\n2\n3\n7\n5\n6\n1\n")
    assert r.returncode == 0
    assert "X Wins!" not in r.stdout
    assert "O Wins!" in r.stdout or "Draw!" in r.stdout


def test_cli_arena_export(tmp_path: Path):
    out = tmp_path / "arena_out"
    r = _run_cli(["--seed", "3", "arena", "--games", "4", "--fallback", "0", "--out", str(out)], cwd=tmp_path)
    assert r.returncode == 0
    assert "games=4" in r.stdout and "losses=0" in r.stdout
    assert (out / "arena_games.csv").exists()
    assert (out / "manifest.json").exists()
