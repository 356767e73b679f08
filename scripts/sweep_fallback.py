#!/usr/bin/env python3
"""Loss rate of the engine against a random opponent for several fallback probabilities."""
from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List

from tictactoe_ai.arena import ArenaArgs, run_arena
from tictactoe_ai.search import check_probability
from tictactoe_ai.tracking import log_metrics, maybe_mlflow_run


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Sweep the random-fallback probability")
    ap.add_argument("--probabilities", default="0,0.001,0.01,0.1,0.5", help="Comma-separated values")
    ap.add_argument("--games", type=int, default=200)
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--tracking", choices=["none", "mlflow"], default="none")
    ap.add_argument("--log-dir", type=Path, default=Path("runs"))
    ns = ap.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")

    try:
        probs = [check_probability(float(x)) for x in ns.probabilities.split(",") if x.strip()]
    except ValueError as e:
        # float() failures and InvalidInput both land here
        logging.error("Bad --probabilities value: %s", e)
        return 2
    print("fallback,games,wins,draws,losses,loss_rate,mean_plies,seconds")
    for p in probs:
        with maybe_mlflow_run(ns.tracking == "mlflow", run_name=f"sweep_p{p}", log_dir=ns.log_dir):
            t0 = time.perf_counter()
            res = run_arena(ArenaArgs(games=ns.games, opponent="random", fallback=p, seed=ns.seed))
            elapsed = time.perf_counter() - t0
            s = res.summary
            log_metrics({"seconds": elapsed})
        print(
            f"{p},{s['games']},{s['engine_wins']},{s['draws']},{s['engine_losses']},"
            f"{s['loss_rate']:.4f},{s['mean_plies']:.2f},{elapsed:.2f}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
