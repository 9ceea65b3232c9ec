from __future__ import annotations

import argparse
import json
from pathlib import Path

from trade_signal.config import load_config
from trade_signal.monitoring import LogNotifier, NotifierObserver, format_summary, serialize_result
from trade_signal.sweep import SweepRunner, generate_jobs, generate_strategies, job_count


def main() -> None:
    parser = argparse.ArgumentParser(description="Grid-search strategy parameters from a YAML config")
    parser.add_argument("--config", required=True)
    parser.add_argument("--workers", type=int, default=None, help="Overrides sweep.workers (0 = cpu count - 1)")
    parser.add_argument("--output", help="Optional JSON report path for the best candidate")
    args = parser.parse_args()

    config = load_config(args.config)
    if config.sweep is None:
        raise SystemExit(f"{args.config} has no sweep section")

    samples = config.load_samples()
    prices = [sample.price for sample in samples]
    grid = config.sweep.build_grid(prices)
    strategies = generate_strategies(grid)
    total = job_count(strategies, grid.fraction_steps)

    workers = args.workers if args.workers is not None else config.sweep.workers
    runner = SweepRunner(
        config.backtester_factory(),
        workers=workers,
        observer=NotifierObserver(LogNotifier(prefix=config.monitoring.notify_prefix)),
    )
    print(f"Sweeping {len(strategies)} strategies x {grid.fraction_steps} fractions = {total} jobs on {runner.workers} workers")

    best = runner.run(samples, generate_jobs(strategies, grid.fraction_steps, grid.max_fraction), total=total)
    if best is None:
        raise SystemExit("No candidate completed successfully")

    print(f"Completed {best.completed} jobs, {best.failed} failed")
    print(f"Best strategy: {best.candidate.strategy.describe()}")
    print(f"Sizing fraction: {best.candidate.sizing_fraction:.2f}")
    print(format_summary(best.result))

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "completed": best.completed,
            "failed": best.failed,
            "best": serialize_result(best.result, include_curve=False),
        }
        output_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
        print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
