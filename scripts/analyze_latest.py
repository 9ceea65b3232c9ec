from __future__ import annotations

import argparse

from trade_signal.config import load_config
from trade_signal.rule_engine import analyze


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the signal for the most recent candle")
    parser.add_argument("--config", required=True)
    args = parser.parse_args()

    config = load_config(args.config)
    samples = config.load_samples()
    strategy = config.strategy.build([sample.price for sample in samples])
    analysis = analyze(samples, strategy)

    mas = analysis.moving_averages
    print(f"Last candle: {analysis.last.time.isoformat()} price={analysis.last.price:.4f}")
    print(f"SMA short={mas.short:.4f} long={mas.long:.4f}")
    print(f"Decision: {analysis.decision.action.value} ({analysis.decision.reason})")


if __name__ == "__main__":
    main()
