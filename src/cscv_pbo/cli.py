"""CLI entry point."""

import argparse
import json
import sys

from cscv_pbo import config
from cscv_pbo.errors import PBOError
from cscv_pbo.log import get_logger
from cscv_pbo.robustness import PBOResult, pbo


def _print_result(result: PBOResult, title: str, args) -> None:
    summary = result.summary()

    print(f"\n{'='*40}")
    print(f"  {title}")
    print(f"{'='*40}")
    for k, v in summary.items():
        if v is None:
            print(f"  {k:.<25} n/a")
        elif k in ("pbo", "prob_loss"):
            print(f"  {k:.<25} {v:.2%}")
        elif isinstance(v, float):
            print(f"  {k:.<25} {v:.4f}")
        else:
            print(f"  {k:.<25} {v}")

    if result.pbo > 0.5:
        print("  ** High PBO: the in-sample winner is likely overfit")

    if args.records:
        result.to_frame().to_csv(args.records)
        print(f"\n  Lambda records saved to {args.records}")

    if args.json:
        with open(args.json, "w") as f:
            json.dump(summary, f, indent=2, default=str)
        print(f"  Summary saved to {args.json}")


def _run_pbo(matrix, args) -> PBOResult:
    return pbo(
        matrix,
        n_partitions=args.partitions,
        method=args.method,
        risk_free_rate=args.risk_free_rate,
        seed=args.seed,
        tie_break=args.tie_break,
        rank_ties=args.rank_ties,
        strict=args.strict,
        on_missing="skip" if args.skip_missing else "raise",
        n_jobs=args.jobs,
    )


def cmd_run(args):
    from cscv_pbo.data import load, to_matrix

    df = load(args.data)
    matrix, names = to_matrix(df, args.column)
    result = _run_pbo(matrix, args)

    title = f"Data: {args.data} ({matrix.shape[0]} rows x {matrix.shape[1]} strategies)"
    _print_result(result, title, args)

    counts = {}
    for n in result.n_stars:
        counts[names[n]] = counts.get(names[n], 0) + 1
    best, hits = max(counts.items(), key=lambda kv: kv[1])
    print(f"\n  Most frequent in-sample winner: {best} ({hits}/{len(result.records)} splits)")
    return result


def cmd_simulate(args):
    from cscv_pbo.datasets import SCENARIOS

    kwargs = {"n_periods": args.periods, "n_strategies": args.strategies}
    if args.scenario != "flat":
        kwargs["seed"] = args.data_seed
    matrix = SCENARIOS[args.scenario](**kwargs)
    result = _run_pbo(matrix, args)
    _print_result(result, f"Scenario: {args.scenario} ({args.periods} x {args.strategies})", args)
    return result


def _add_pbo_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--partitions", "-S", type=int, required=True,
                   help="number of time blocks (even); C(S, S/2) splits are evaluated")
    p.add_argument("--method", "-e", default=config.EVAL_METHOD,
                   help="evaluation method: average or sharpe")
    p.add_argument("--risk-free-rate", type=float, default=config.RISK_FREE_RATE)
    p.add_argument("--seed", type=int, default=None, help="seed for tie-breaking")
    p.add_argument("--tie-break", default=config.TIE_BREAK, choices=["random", "first"])
    p.add_argument("--rank-ties", default=config.RANK_TIES,
                   choices=["random", "average", "min", "max", "first", "last"])
    p.add_argument("--strict", action="store_true",
                   help="require row count divisible by the partition count")
    p.add_argument("--skip-missing", action="store_true",
                   help="skip splits with undefined scores instead of failing")
    p.add_argument("--jobs", "-j", type=int, default=config.N_JOBS)
    p.add_argument("--records", "-r", help="save per-split lambda records to this CSV")
    p.add_argument("--json", help="save the summary to this JSON file")


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="cscv-pbo", description="Probability of Backtest Overfitting via CSCV")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command")

    # run
    run = sub.add_parser("run", help="compute PBO for a returns file")
    run.add_argument("--data", "-d", required=True, help="CSV, TSV or Parquet file")
    run.add_argument("--column", "-c", action="append",
                     help="strategy column to include (repeatable, default all numeric)")
    _add_pbo_args(run)

    # simulate
    sim = sub.add_parser("simulate", help="compute PBO for a synthetic scenario")
    sim.add_argument("--scenario", default="no_skill",
                     choices=["no_skill", "flat", "sparse", "skilled"])
    sim.add_argument("--periods", type=int, default=1560)
    sim.add_argument("--strategies", type=int, default=20)
    sim.add_argument("--data-seed", type=int, default=42)
    _add_pbo_args(sim)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    get_logger(level=args.log_level)

    dispatch = {
        "run": cmd_run,
        "simulate": cmd_simulate,
    }
    try:
        return dispatch[args.command](args)
    except (PBOError, FileNotFoundError, KeyError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
