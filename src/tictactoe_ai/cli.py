from __future__ import annotations

import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import Optional

from .arena import FORMATS, OPPONENTS, ArenaArgs, run_arena
from .board import (
    current_player,
    is_valid_state,
    mark_symbol,
    normalize_mark,
    other_mark,
    parse_board,
    render_board,
    serialize_board,
)
from .config import EngineConfig
from .errors import InvalidInput, InvalidState, TicTacToeError
from .game import Game
from .outcome import evaluate, scan_board
from .search import choose_move, score_moves
from .tactics import blocking_moves, fork_moves, immediate_winning_moves

BOARD_HELP = "Board string, e.g. 100020200 or X...O.... (0/. empty, 1/X, 2/O)"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ttt-ai", description="Tic-tac-toe minimax opponent")
    sub = p.add_subparsers(dest="cmd")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--seed", type=int, default=None, help="Seed for the random fallback move")

    p_eval = sub.add_parser("evaluate", help="Report win/draw/in-progress for a board")
    p_eval.add_argument("--board", help=BOARD_HELP + " (omit with --stdin)")
    p_eval.add_argument(
        "--stdin", action="store_true", help="Read many boards from stdin and stream CSV output"
    )

    p_move = sub.add_parser("move", help="Choose the computer's move for a board")
    p_move.add_argument("--board", help=BOARD_HELP + " (omit with --stdin)")
    p_move.add_argument(
        "--ai", choices=["X", "O"], default=None, help="Side the engine plays (default: side to move)"
    )
    p_move.add_argument(
        "--fallback", type=float, default=None,
        help="Probability of a random move instead of the searched one (default: TTT_RANDOM_FALLBACK or 0.001)",
    )
    p_move.add_argument(
        "--stdin", action="store_true", help="Read many boards from stdin and stream CSV output"
    )

    p_play = sub.add_parser("play", help="Play an interactive game in the terminal")
    p_play.add_argument("--human", choices=["X", "O"], default="X", help="Your mark (X moves first)")
    p_play.add_argument("--fallback", type=float, default=None, help="Computer's random-move probability")
    p_play.add_argument("--think-delay", type=float, default=None, help="Seconds before the computer moves")

    p_arena = sub.add_parser("arena", help="Self-play games to measure the engine")
    p_arena.add_argument("--games", type=int, default=100, help="Number of games (default: 100)")
    p_arena.add_argument("--opponent", choices=list(OPPONENTS), default="random")
    p_arena.add_argument("--engine-mark", choices=["X", "O"], default="O", help="Engine's mark in game 0")
    p_arena.add_argument(
        "--no-alternate", dest="alternate_start", action="store_false",
        help="Keep the engine on the same mark every game",
    )
    p_arena.add_argument("--fallback", type=float, default=None, help="Engine's random-move probability")
    p_arena.add_argument(
        "--opponent-fallback", type=float, default=0.0, help="Random-move probability of an engine opponent"
    )
    p_arena.add_argument("--out", type=Path, default=None, help="Directory for exported results")
    p_arena.add_argument("--format", choices=list(FORMATS), default="csv", help="Export format")
    p_arena.add_argument("--tracking", choices=["none", "mlflow"], default="none")
    p_arena.add_argument(
        "--log-dir", type=Path, default=Path("runs"), help="Directory for the mlflow local backend"
    )
    return p


def _config(ns: argparse.Namespace, **overrides) -> EngineConfig:
    cfg = EngineConfig.from_env()
    if ns.seed is not None:
        cfg.seed = ns.seed
    for key, value in overrides.items():
        if value is not None:
            setattr(cfg, key, value)
    # re-run field validation after overrides
    return EngineConfig(cfg.random_fallback_probability, cfg.think_delay, cfg.seed)


def _read_board(raw: Optional[str]) -> list:
    b = parse_board(raw or "")
    if not is_valid_state(b):
        raise InvalidInput("Board is not a valid reachable state.")
    return b


def _cmd_evaluate(ns: argparse.Namespace) -> int:
    if ns.stdin:
        w = csv.writer(sys.stdout)
        w.writerow(["board", "status", "winner", "line"])
        for line in sys.stdin:
            raw = line.strip()
            if not raw:
                continue
            try:
                b = parse_board(raw)
            except InvalidInput:
                continue
            out = scan_board(b)
            w.writerow([raw, out.status, mark_symbol(out.winner), " ".join(map(str, out.line or ()))])
        return 0
    out = evaluate(parse_board(ns.board or ""))
    logging.info(
        "status=%s winner=%s line=%s",
        out.status,
        mark_symbol(out.winner),
        list(out.line) if out.line else None,
    )
    return 0


def _cmd_move(ns: argparse.Namespace) -> int:
    cfg = _config(ns, random_fallback_probability=ns.fallback)
    rng = cfg.make_rng()
    if ns.stdin:
        w = csv.writer(sys.stdout)
        w.writerow(["board", "ai", "move"])
        for line in sys.stdin:
            raw = line.strip()
            if not raw:
                continue
            try:
                b = _read_board(raw)
                ai = normalize_mark(ns.ai) if ns.ai else current_player(b)
                mv = choose_move(b, ai, other_mark(ai), cfg.random_fallback_probability, rng=rng)
            except TicTacToeError:
                continue
            w.writerow([raw, mark_symbol(ai), mv])
        return 0
    b = _read_board(ns.board)
    ai = normalize_mark(ns.ai) if ns.ai else current_player(b)
    human = other_mark(ai)
    mv = choose_move(b, ai, human, cfg.random_fallback_probability, rng=rng)
    logging.info("ai=%s move=%d", mark_symbol(ai), mv)
    logging.info("scores=%s", score_moves(b, ai, human))
    logging.info(
        "wins=%s blocks=%s forks=%s",
        immediate_winning_moves(b, ai),
        blocking_moves(b, ai),
        fork_moves(b, ai),
    )
    return 0


def _cmd_play(ns: argparse.Namespace) -> int:
    cfg = _config(ns, random_fallback_probability=ns.fallback, think_delay=ns.think_delay)
    game = Game(human_mark=ns.human, config=cfg)
    print("Cells are numbered 0-8, row by row. Enter q to quit.")
    while game.active:
        if not game.is_human_turn():
            mv = game.ai_move()
            print(f"Computer plays {mv}")
            continue
        print(render_board(game.board))
        print(game.status_text())
        try:
            raw = input("> ").strip()
        except EOFError:
            return 0
        if raw.lower() in {"q", "quit"}:
            return 0
        try:
            game.human_move(int(raw))
        except ValueError as e:
            # int() failures and InvalidInput both land here
            print(f"Invalid cell: {e}")
        except InvalidState as e:
            print(e)
    print(render_board(game.board))
    print(game.status_text())
    if game.winning_line:
        print("Winning line: " + " ".join(map(str, game.winning_line)))
    logging.debug("final board=%s", serialize_board(game.board))
    return 0


def _cmd_arena(ns: argparse.Namespace, argv: list[str] | None) -> int:
    cfg = _config(ns, random_fallback_probability=ns.fallback)
    result = run_arena(ArenaArgs(
        games=ns.games,
        opponent=ns.opponent,
        engine_mark=ns.engine_mark,
        alternate_start=ns.alternate_start,
        fallback=cfg.random_fallback_probability,
        opponent_fallback=ns.opponent_fallback,
        seed=cfg.seed,
        out=ns.out,
        format=ns.format,
        tracking=ns.tracking,
        log_dir=ns.log_dir,
        cli_argv=list(argv) if argv is not None else None,
    ))
    s = result.summary
    print(f"games={s['games']} wins={s['engine_wins']} draws={s['draws']} losses={s['engine_losses']}")
    if result.out is not None:
        logging.info("Exported arena results to: %s", result.out)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if getattr(ns, "verbose", False) else logging.INFO,
                        format="[%(levelname)s] %(message)s")

    if getattr(ns, "version", False):
        from importlib.metadata import PackageNotFoundError, version as _ver

        try:
            print(_ver("tictactoe-ai"))
        except PackageNotFoundError:
            print("unknown")
        return 0

    try:
        if ns.cmd == "evaluate":
            return _cmd_evaluate(ns)
        if ns.cmd == "move":
            return _cmd_move(ns)
        if ns.cmd == "play":
            return _cmd_play(ns)
        if ns.cmd == "arena":
            return _cmd_arena(ns, argv)
    except InvalidInput as e:
        logging.error("%s", e)
        return 2
    except InvalidState as e:
        logging.error("%s", e)
        return 2

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
