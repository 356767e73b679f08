"""
Arena: self-play matches that measure how the random-fallback knob affects play.

The engine plays a series of games against either a uniformly random opponent
or a second engine. Results are summarized and can be exported as CSV and/or
Parquet together with a manifest.json for reproducibility.
"""
from __future__ import annotations

import csv
import hashlib
import importlib.util
import json
import logging
import random
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .board import EMPTY, O, X, empty_cells, mark_symbol, normalize_mark, other_mark
from .config import make_rng
from .errors import InvalidInput
from .outcome import WIN, scan_board
from .search import DEFAULT_RANDOM_FALLBACK, check_probability, choose_move
from .tracking import log_artifact, log_metrics, log_params, maybe_mlflow_run

OPPONENTS = ("random", "engine")
FORMATS = ("csv", "parquet", "both")
RESULTS_CSV = "arena_games.csv"
RESULTS_PARQUET = "arena_games.parquet"


@dataclass
class ArenaArgs:
    games: int = 100
    opponent: str = "random"
    engine_mark: Any = O
    alternate_start: bool = True  # swap the engine's mark every game
    fallback: float = DEFAULT_RANDOM_FALLBACK
    opponent_fallback: float = 0.0
    seed: Optional[int] = None
    out: Optional[Path] = None
    format: str = "csv"
    tracking: str = "none"
    log_dir: Path = Path("runs")
    cli_argv: List[str] | None = None


@dataclass
class GameRecord:
    game_index: int
    engine_mark: int
    moves: List[int] = field(default_factory=list)
    winner: int = EMPTY
    line: Optional[Tuple[int, int, int]] = None

    @property
    def plies(self) -> int:
        return len(self.moves)

    @property
    def result(self) -> str:
        """Result from the engine's side: win, draw or loss."""
        if self.winner == EMPTY:
            return "draw"
        return "win" if self.winner == self.engine_mark else "loss"

    def to_row(self) -> Dict[str, Any]:
        return {
            "game": self.game_index,
            "engine_mark": mark_symbol(self.engine_mark),
            "moves": " ".join(map(str, self.moves)),
            "plies": self.plies,
            "winner": mark_symbol(self.winner),
            "result": self.result,
            "winning_line": " ".join(map(str, self.line)) if self.line else "",
        }


@dataclass
class ArenaResult:
    records: List[GameRecord]
    summary: Dict[str, Any]
    out: Optional[Path] = None


def _opponent_move(board: List[int], mark: int, opponent: str, fallback: float, rng: random.Random) -> int:
    if opponent == "random":
        return rng.choice(empty_cells(board))
    return choose_move(board, mark, other_mark(mark), fallback, rng=rng)


def play_game(
    engine_mark: int,
    opponent: str = "random",
    fallback: float = DEFAULT_RANDOM_FALLBACK,
    opponent_fallback: float = 0.0,
    rng: Optional[random.Random] = None,
    game_index: int = 0,
) -> GameRecord:
    """Play one full game from the empty board; X moves first."""
    if rng is None:
        rng = random.Random()
    engine_mark = normalize_mark(engine_mark)
    record = GameRecord(game_index=game_index, engine_mark=engine_mark)
    board = [EMPTY] * 9
    mark = X
    outcome = scan_board(board)
    while not outcome.is_terminal:
        if mark == engine_mark:
            move = choose_move(board, engine_mark, other_mark(engine_mark), fallback, rng=rng)
        else:
            move = _opponent_move(board, mark, opponent, opponent_fallback, rng)
        board[move] = mark
        record.moves.append(move)
        outcome = scan_board(board)
        mark = other_mark(mark)
    if outcome.status == WIN:
        record.winner = outcome.winner
        record.line = outcome.line
    return record


def ci95(values: List[float]) -> Tuple[float, float]:
    if not values:
        return (float("nan"), float("nan"))
    arr = np.asarray(values, dtype=float)
    m = float(arr.mean())
    s = float(arr.std()) if arr.size > 1 else 0.0
    return m, 1.96 * s / float(np.sqrt(arr.size))


def summarize(records: List[GameRecord]) -> Dict[str, Any]:
    results = [r.result for r in records]
    n = len(records)
    mean_plies, half = ci95([float(r.plies) for r in records])
    return {
        "games": n,
        "engine_wins": results.count("win"),
        "draws": results.count("draw"),
        "engine_losses": results.count("loss"),
        "loss_rate": results.count("loss") / n if n else 0.0,
        "mean_plies": mean_plies,
        "plies_ci95_half": half,
    }


def _validate(args: ArenaArgs) -> None:
    if isinstance(args.games, bool) or not isinstance(args.games, int) or args.games < 1:
        raise InvalidInput(f"games must be a positive integer, got {args.games!r}")
    if args.opponent not in OPPONENTS:
        raise InvalidInput(f"Unknown opponent: {args.opponent!r} (choose from {', '.join(OPPONENTS)})")
    if (args.format or "csv").lower() not in FORMATS:
        raise InvalidInput(f"Unknown export format: {args.format}")
    normalize_mark(args.engine_mark)
    check_probability(args.fallback)
    check_probability(args.opponent_fallback)


def _have_parquet_deps() -> bool:
    return importlib.util.find_spec("pandas") is not None and importlib.util.find_spec("pyarrow") is not None


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _package_versions() -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for pkg in ("numpy", "pandas", "pyarrow"):
        if importlib.util.find_spec(pkg) is None:
            continue
        mod = __import__(pkg)
        ver = getattr(mod, "__version__", None)
        if ver:
            versions[pkg] = ver
    return versions


def export_results(args: ArenaArgs, records: List[GameRecord], summary: Dict[str, Any]) -> Path:
    """Write results under args.out; returns the directory."""
    if args.out is None:
        raise InvalidInput("out directory required for export")
    fmt = (args.format or "csv").lower()
    want_parquet = fmt in {"parquet", "both"}
    have_parquet = _have_parquet_deps() if want_parquet else False
    if want_parquet and not have_parquet:
        msg = (
            "Parquet dependencies not available (install pandas and pyarrow). "
            "Use pip install .[parquet] to enable parquet support."
        )
        if fmt == "parquet":
            # nothing has been written yet
            raise RuntimeError(msg)
        logging.warning("%s Proceeding with CSV only; manifest will record parquet_written=false.", msg)

    args.out.mkdir(parents=True, exist_ok=True)
    rows = [r.to_row() for r in sorted(records, key=lambda r: r.game_index)]
    files: Dict[str, Optional[str]] = {"csv": None, "parquet": None}

    if fmt in {"csv", "both"}:
        csv_path = args.out / RESULTS_CSV
        with csv_path.open("w", newline="") as f:
            w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            w.writeheader()
            w.writerows(rows)
        files["csv"] = str(csv_path)
        logging.info("Wrote CSV: %s (%d rows)", csv_path, len(rows))

    if want_parquet and have_parquet:
        import pandas as pd  # type: ignore

        parquet_path = args.out / RESULTS_PARQUET
        pd.DataFrame(rows).to_parquet(parquet_path)
        files["parquet"] = str(parquet_path)
        logging.info("Wrote Parquet: %s", parquet_path)

    manifest = {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "args": {
            "games": args.games,
            "opponent": args.opponent,
            "engine_mark": mark_symbol(normalize_mark(args.engine_mark)),
            "alternate_start": args.alternate_start,
            "fallback": args.fallback,
            "opponent_fallback": args.opponent_fallback,
            "seed": args.seed,
            "format": fmt,
        },
        "cli_argv": args.cli_argv,
        "python": {"python_version": sys.version.split(" ")[0], "packages": _package_versions()},
        "summary": summary,
        "files": files,
        "checksums": {label: _sha256_file(Path(p)) for label, p in files.items() if p is not None},
        "parquet_written": files["parquet"] is not None,
    }
    (args.out / "manifest.json").write_text(json.dumps(manifest, indent=2))
    logging.info("Wrote manifest.json")
    for p in files.values():
        if p is not None:
            log_artifact(Path(p))
    log_artifact(args.out / "manifest.json")
    return args.out


def run_arena(args: ArenaArgs) -> ArenaResult:
    _validate(args)
    rng = make_rng(args.seed)
    first_mark = normalize_mark(args.engine_mark)
    with maybe_mlflow_run(args.tracking == "mlflow", run_name="arena", log_dir=args.log_dir):
        log_params({
            "games": args.games,
            "opponent": args.opponent,
            "fallback": args.fallback,
            "opponent_fallback": args.opponent_fallback,
            "seed": args.seed,
        })
        records: List[GameRecord] = []
        for i in range(args.games):
            mark = other_mark(first_mark) if args.alternate_start and i % 2 else first_mark
            records.append(play_game(
                mark,
                opponent=args.opponent,
                fallback=args.fallback,
                opponent_fallback=args.opponent_fallback,
                rng=rng,
                game_index=i,
            ))
        summary = summarize(records)
        logging.info(
            "arena games=%d wins=%d draws=%d losses=%d mean_plies=%.2f",
            summary["games"], summary["engine_wins"], summary["draws"],
            summary["engine_losses"], summary["mean_plies"],
        )
        log_metrics({
            "engine_wins": summary["engine_wins"],
            "draws": summary["draws"],
            "engine_losses": summary["engine_losses"],
            "loss_rate": summary["loss_rate"],
            "mean_plies": summary["mean_plies"],
        })
        out = export_results(args, records, summary) if args.out is not None else None
    return ArenaResult(records=records, summary=summary, out=out)
