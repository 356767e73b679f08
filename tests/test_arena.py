import csv
import importlib
import json
import random
from pathlib import Path

import pytest

from tictactoe_ai.arena import ArenaArgs, ci95, play_game, run_arena
from tictactoe_ai.board import EMPTY, O, X
from tictactoe_ai.errors import InvalidInput
from tictactoe_ai.outcome import evaluate


def _replay(moves):
    board = [EMPTY] * 9
    mark = X
    for mv in moves:
        assert board[mv] == EMPTY
        board[mv] = mark
        mark = O if mark == X else X
    return board


def test_play_game_record_is_consistent():
    rec = play_game(O, opponent="random", fallback=0.0, rng=random.Random(3))
    board = _replay(rec.moves)
    out = evaluate(board)
    assert out.is_terminal
    assert rec.plies == len(rec.moves)
    assert rec.winner == (out.winner or EMPTY)
    assert rec.result in ("win", "draw")


def test_perfect_engines_always_draw():
    rec = play_game(X, opponent="engine", fallback=0.0, opponent_fallback=0.0)
    assert rec.result == "draw"
    assert rec.plies == 9


def test_run_arena_without_fallback_never_loses():
    res = run_arena(ArenaArgs(games=6, opponent="random", fallback=0.0, seed=1))
    assert res.summary["games"] == 6
    assert res.summary["engine_losses"] == 0
    assert res.summary["loss_rate"] == 0.0
    assert [r.engine_mark for r in res.records] == [O, X, O, X, O, X]
    assert res.out is None


def test_run_arena_is_reproducible():
    args = dict(games=4, opponent="random", fallback=0.5, seed=11)
    a = run_arena(ArenaArgs(**args))
    b = run_arena(ArenaArgs(**args))
    assert [r.moves for r in a.records] == [r.moves for r in b.records]


def test_export_csv_and_manifest(tmp_path: Path):
    out = tmp_path / "arena"
    res = run_arena(ArenaArgs(games=3, fallback=0.0, seed=5, out=out))
    assert res.out == out
    with (out / "arena_games.csv").open() as f:
        rows = list(csv.DictReader(f))
    assert [int(r["game"]) for r in rows] == [0, 1, 2]
    assert set(rows[0]) == {"game", "engine_mark", "moves", "plies", "winner", "result", "winning_line"}
    manifest = json.loads((out / "manifest.json").read_text())
    assert manifest["summary"]["games"] == 3
    assert manifest["args"]["seed"] == 5
    assert manifest["parquet_written"] is False
    assert "csv" in manifest["checksums"]


def _hide_parquet_deps(monkeypatch: pytest.MonkeyPatch):
    real_find_spec = importlib.util.find_spec

    def fake_find_spec(name: str, package=None):  # type: ignore[override]
        if name in {"pandas", "pyarrow"}:
            return None
        return real_find_spec(name, package)

    monkeypatch.setattr(importlib.util, "find_spec", fake_find_spec)


def test_format_both_graceful_without_parquet_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _hide_parquet_deps(monkeypatch)
    out = tmp_path / "both"
    run_arena(ArenaArgs(games=2, fallback=0.0, seed=2, out=out, format="both"))
    assert (out / "arena_games.csv").exists()
    assert not (out / "arena_games.parquet").exists()
    assert json.loads((out / "manifest.json").read_text())["parquet_written"] is False


def test_format_parquet_raises_without_deps(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _hide_parquet_deps(monkeypatch)
    out = tmp_path / "parquet"
    with pytest.raises(RuntimeError):
        run_arena(ArenaArgs(games=2, fallback=0.0, seed=2, out=out, format="parquet"))
    assert not out.exists() or not any(out.iterdir())


@pytest.mark.parametrize("kwargs", [
    {"games": 0},
    {"opponent": "human"},
    {"format": "xlsx"},
    {"engine_mark": "Z"},
    {"fallback": 2.0},
])
def test_bad_arena_args(kwargs):
    with pytest.raises(InvalidInput):
        run_arena(ArenaArgs(**kwargs))


def test_ci95():
    m, half = ci95([5.0, 5.0, 5.0])
    assert m == 5.0 and half == 0.0
    m, half = ci95([5.0, 7.0])
    assert m == 6.0 and half > 0.0


def test_export_without_out_dir_is_invalid_input():
    from tictactoe_ai.arena import export_results, summarize

    rec = play_game(O, fallback=0.0, rng=random.Random(0))
    with pytest.raises(InvalidInput):
        export_results(ArenaArgs(out=None), [rec], summarize([rec]))


def test_mlflow_tracking_soft_fails_when_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog):
    import tictactoe_ai.tracking as tracking

    real_find_spec = importlib.util.find_spec

    def fake_find_spec(name: str, package=None):  # type: ignore[override]
        if name == "mlflow":
            return None
        return real_find_spec(name, package)

    monkeypatch.setattr(importlib.util, "find_spec", fake_find_spec)
    with caplog.at_level("WARNING"):
        res = run_arena(ArenaArgs(games=2, fallback=0.0, seed=4, out=tmp_path / "tracked", tracking="mlflow"))
    assert res.summary["games"] == 2
    assert (tmp_path / "tracked" / "manifest.json").exists()
    assert "MLflow not installed" in caplog.text
    assert tracking._active is False
    # log helpers are no-ops outside an active run
    tracking.log_params({"a": 1})
    tracking.log_metrics({"b": 1.0})
    tracking.log_artifact(tmp_path / "tracked" / "manifest.json")
