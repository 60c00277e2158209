# lottoprophet/cli.py
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .config import data_dir, load_engine_config
from .engine.auto_tune import WeightStore
from .engine.pipeline import RecommendationPipeline
from .strategies.registry import list_strategies
from .utilities.draws import read_draws_csv
from .utilities.logger import configure_logging

WEIGHTS_NAME = "strategy_weights.json"


def _print(df: pd.DataFrame) -> None:
    print(df.to_string(index=False))


def _weights_path(args) -> Path:
    return Path(args.weights) if args.weights else data_dir() / WEIGHTS_NAME


def _pipeline(args) -> RecommendationPipeline:
    cfg = load_engine_config(Path(args.config) if args.config else None)
    store = WeightStore.for_strategies(list_strategies(), cfg)
    store.load(_weights_path(args))
    return RecommendationPipeline(config=cfg, store=store)


def cmd_predict(args) -> int:
    pipe = _pipeline(args)
    rec = pipe.generate(read_draws_csv(args.csv))
    if args.json:
        print(json.dumps(rec.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(rec.summary())
        if rec.rationale:
            print(f"  why     : {rec.rationale}")
    return 0


def cmd_backtest(args) -> int:
    pipe = _pipeline(args)
    out = pipe.run_backtest(read_draws_csv(args.csv), args.window, commit=args.save)
    print(f"composite accuracy {out['composite_accuracy']:.3f} "
          f"(evaluated {out['evaluated']}, skipped {out['skipped']}, completed {out['completed']})")
    acc = pd.DataFrame(sorted(out["per_strategy_accuracy"].items(), key=lambda t: (-t[1], t[0])),
                       columns=["strategy", "accuracy"])
    _print(acc)
    if out["recommended_weight_changes"]:
        moved = pd.DataFrame(out["recommended_weight_changes"])
        moved = moved[moved["action"] != "hold"]
        if not moved.empty:
            _print(moved[["name", "action", "old_weight", "new_weight"]])
    if args.save:
        pipe.store.save(_weights_path(args))
        print(f"weights saved to {_weights_path(args)} ({out['adjustment']})")
    return 0


def cmd_show_weights(args) -> int:
    cfg = load_engine_config(Path(args.config) if args.config else None)
    store = WeightStore.for_strategies(list_strategies(), cfg)
    store.load(_weights_path(args))
    print(json.dumps(store.to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="lottoprophet")
    p.add_argument("--config", default="", help="JSON config file (defaults to Data/config.json)")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="cmd", required=True)

    pr = sub.add_parser("predict", help="Recommend numbers for the next draw")
    pr.add_argument("--csv", required=True, help="Draw history CSV")
    pr.add_argument("--weights", default="", help="Weight snapshot JSON")
    pr.add_argument("--json", action="store_true", help="Print the recommendation as JSON")
    pr.set_defaults(func=cmd_predict)

    bt = sub.add_parser("backtest", help="Walk-forward replay and weight adjustment")
    bt.add_argument("--csv", required=True)
    bt.add_argument("--window", type=int, default=None)
    bt.add_argument("--weights", default="")
    bt.add_argument("--save", action="store_true", help="Commit adjusted weights to the snapshot file")
    bt.set_defaults(func=cmd_backtest)

    w = sub.add_parser("show-weights")
    w.add_argument("--weights", default="")
    w.set_defaults(func=cmd_show_weights)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "INFO")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
