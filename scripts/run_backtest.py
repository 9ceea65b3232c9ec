from __future__ import annotations

import argparse
import json
import uuid
from pathlib import Path

from trade_signal.config import compute_config_hash, load_config, serialize_config
from trade_signal.monitoring import AuditLog, AuditObserver, format_summary, serialize_result
from trade_signal.strategy import Candidate, buy_and_hold_equity


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a single backtest from a YAML config")
    parser.add_argument("--config", required=True)
    parser.add_argument("--output", help="Optional JSON report path")
    parser.add_argument("--no-curve", action="store_true", help="Omit the equity curve from the JSON report")
    args = parser.parse_args()

    config_path = Path(args.config)
    config = load_config(config_path)
    samples = config.load_samples()
    prices = [sample.price for sample in samples]

    observer = None
    if config.monitoring.audit_log_path:
        audit_log = AuditLog(
            config.monitoring.audit_log_path,
            run_id=uuid.uuid4().hex,
            config_hash=compute_config_hash(config_path),
        )
        observer = AuditObserver(audit_log)

    backtester = config.backtester_factory(observer=observer)()
    candidate = Candidate(sizing_fraction=config.sizing_fraction, strategy=config.strategy.build(prices))
    result = backtester.run(samples, candidate)

    print(f"Strategy: {candidate.strategy.describe()}")
    print(format_summary(result, buy_and_hold_equity(samples, config.initial_cash, config.initial_coin)))

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "config": serialize_config(config),
            "result": serialize_result(result, include_curve=not args.no_curve),
        }
        output_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
        print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
