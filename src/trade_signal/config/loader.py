"""Load and freeze configuration files."""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from trade_signal.config.models import (
    BacktestConfig,
    FilterSettings,
    MonitoringConfig,
    SimulatorMode,
    StrategySettings,
    SweepSettings,
    VolatilitySettings,
)
from trade_signal.strategy.indicators import MovingAverageConfig, RegimeFilter
from trade_signal.strategy.models import BreakoutConfig, PullbackConfig


def load_config(path: str | Path) -> BacktestConfig:
    path = Path(path)
    data = _load_yaml(path)

    name = str(_require(data, "name"))
    input_path = Path(str(_require(data, "input")))
    if not input_path.is_absolute():
        input_path = path.parent / input_path

    sample_hours = int(data.get("sample_hours", 1))
    if sample_hours <= 0:
        raise ValueError(f"Invalid sample_hours: {sample_hours}")

    sweep_data = data.get("sweep")
    return BacktestConfig(
        name=name,
        input=str(input_path),
        mode=_parse_enum(SimulatorMode, data.get("mode", "position"), "mode"),
        sample_hours=sample_hours,
        initial_cash=_positive_float(data.get("initial_cash", 1000.0), "initial_cash"),
        initial_coin=_non_negative_float(data.get("initial_coin", 0.0), "initial_coin"),
        fee_bps=_non_negative_float(data.get("fee_bps", 0.0), "fee_bps"),
        sizing_fraction=float(data.get("sizing_fraction", 0.5)),
        strategy=_parse_strategy(_section(data, "strategy")),
        monitoring=_parse_monitoring(_section(data, "monitoring"), path.parent),
        sweep=_parse_sweep(sweep_data) if sweep_data is not None else None,
    )


def compute_config_hash(path: str | Path) -> str:
    digest = hashlib.sha256()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _default_lock_path(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".lock.json")


def freeze_config(path: str | Path, lock_path: Optional[str | Path] = None) -> Path:
    """Validate the config and pin its content hash next to it.

    The lock records the run name and simulator mode so a frozen sweep can
    be told apart from a frozen single backtest at a glance.
    """
    path = Path(path)
    config = load_config(path)
    lock_path = Path(lock_path) if lock_path is not None else _default_lock_path(path)

    payload = {
        "name": config.name,
        "mode": config.mode.value,
        "has_sweep": config.sweep is not None,
        "config_path": str(path),
        "config_hash": compute_config_hash(path),
        "frozen_at_utc": datetime.now(timezone.utc).isoformat(),
    }
    lock_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return lock_path


def read_config_lock(lock_path: str | Path) -> Optional[dict[str, Any]]:
    lock_path = Path(lock_path)
    if not lock_path.exists():
        return None
    return json.loads(lock_path.read_text(encoding="utf-8"))


def verify_config_lock(path: str | Path, lock_path: Optional[str | Path] = None) -> bool:
    path = Path(path)
    lock = read_config_lock(lock_path if lock_path is not None else _default_lock_path(path))
    if lock is None:
        return False
    return lock.get("config_hash") == compute_config_hash(path)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: config must be a mapping, got {type(data).__name__}")
    return data


def _require(data: dict[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None:
        raise ValueError(f"Missing required config key: {key}")
    return value


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    # An empty block (``strategy:`` with nothing under it) loads as None.
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Invalid {key}: expected a mapping, got {type(value).__name__}")
    return value


def _parse_enum(enum_cls, value: Any, key: str):
    try:
        return enum_cls(value)
    except Exception as exc:
        raise ValueError(f"Invalid {key}: {value}") from exc


def _positive_float(value: Any, key: str) -> float:
    number = float(value)
    if number <= 0:
        raise ValueError(f"Invalid {key}: must be positive, got {value}")
    return number


def _non_negative_float(value: Any, key: str) -> float:
    number = float(value)
    if number < 0:
        raise ValueError(f"Invalid {key}: must be >= 0, got {value}")
    return number


def _positive_int(value: Any, key: str) -> int:
    number = int(value)
    if number <= 0:
        raise ValueError(f"Invalid {key}: must be positive, got {value}")
    return number


def _parse_moving_averages(data: dict[str, Any]) -> MovingAverageConfig:
    short_window = _positive_int(data.get("short_window", 20), "sma.short_window")
    long_window = _positive_int(data.get("long_window", 50), "sma.long_window")
    if long_window < short_window:
        raise ValueError(f"Invalid sma: long_window {long_window} < short_window {short_window}")
    return MovingAverageConfig(short_window=short_window, long_window=long_window)


def _parse_pullback(data: dict[str, Any]) -> PullbackConfig:
    if not isinstance(data, dict):
        raise ValueError(f"Invalid pullback: expected a mapping, got {data!r}")
    # A single tolerance is used for both sides when only one is given.
    bounce = data.get("bounce_tolerance")
    reject = data.get("reject_tolerance")
    if bounce is None and reject is None:
        raise ValueError("Pullback config needs bounce_tolerance or reject_tolerance")
    if bounce is None:
        bounce = reject
    if reject is None:
        reject = bounce
    return PullbackConfig(bounce_tolerance=float(bounce), reject_tolerance=float(reject))


def _parse_volatility(data: Any) -> Optional[VolatilitySettings]:
    if data is None or data is False:
        return None
    if data is True:
        return VolatilitySettings()
    if not isinstance(data, dict):
        raise ValueError(f"Invalid volatility: expected a mapping or boolean, got {data!r}")
    percentile = data.get("percentile")
    return VolatilitySettings(
        period=_positive_int(data.get("period", 5), "volatility.period"),
        floor=_non_negative_float(data.get("floor", 0.003), "volatility.floor"),
        percentile=float(percentile) if percentile is not None else None,
    )


def _parse_regime(data: Any) -> Optional[RegimeFilter]:
    if data is None or data is False:
        return None
    if data is True:
        return RegimeFilter()
    if not isinstance(data, dict):
        raise ValueError(f"Invalid regime: expected a mapping or boolean, got {data!r}")
    return RegimeFilter(
        long_window=_positive_int(data.get("long_window", 200), "regime.long_window"),
        slope_window=_positive_int(data.get("slope_window", 48), "regime.slope_window"),
        min_trend_strength=float(data.get("min_trend_strength", 0.02)),
        min_range=float(data.get("min_range", 0.03)),
    )


def _parse_filters(data: dict[str, Any]) -> FilterSettings:
    return FilterSettings(
        require_trend_filter=bool(data.get("require_trend_filter", True)),
        require_price_confirmation=bool(data.get("require_price_confirmation", True)),
        volatility=_parse_volatility(data.get("volatility")),
        regime=_parse_regime(data.get("regime")),
    )


def _parse_strategy(data: dict[str, Any]) -> StrategySettings:
    lookback = data.get("breakout_lookback")
    pullback = data.get("pullback")
    return StrategySettings(
        breakout=BreakoutConfig(lookback=_positive_int(lookback, "breakout_lookback")) if lookback is not None else None,
        pullback=_parse_pullback(pullback) if pullback is not None else None,
        enable_crossovers=bool(data.get("enable_crossovers", True)),
        enable_bias_only=bool(data.get("enable_bias_only", False)),
        moving_averages=_parse_moving_averages(_section(data, "sma")),
        filters=_parse_filters(_section(data, "filters")),
    )


def _parse_sweep(data: dict[str, Any]) -> SweepSettings:
    min_lookback = _positive_int(data.get("min_lookback", 3), "sweep.min_lookback")
    max_lookback = _positive_int(data.get("max_lookback", 10), "sweep.max_lookback")
    if max_lookback < min_lookback:
        raise ValueError("Invalid sweep: max_lookback < min_lookback")
    return SweepSettings(
        short_windows=tuple(int(value) for value in data.get("short_windows", (5, 10, 20, 30))),
        long_windows=tuple(int(value) for value in data.get("long_windows", (20, 50, 100, 200))),
        min_lookback=min_lookback,
        max_lookback=max_lookback,
        min_pullback=float(data.get("min_pullback", 0.001)),
        max_pullback=float(data.get("max_pullback", 0.01)),
        pullback_step=_positive_float(data.get("pullback_step", 0.001), "sweep.pullback_step"),
        max_fraction=float(data.get("max_fraction", 0.5)),
        fraction_steps=_positive_int(data.get("fraction_steps", 10), "sweep.fraction_steps"),
        workers=int(data.get("workers", 0)),
        filters=_parse_filters(_section(data, "filters")),
    )


def _parse_monitoring(data: dict[str, Any], base_dir: Path) -> MonitoringConfig:
    audit_log_path = data.get("audit_log_path")
    if audit_log_path:
        audit_log_path = Path(str(audit_log_path))
        if not audit_log_path.is_absolute():
            audit_log_path = base_dir / audit_log_path
    return MonitoringConfig(
        audit_log_path=str(audit_log_path) if audit_log_path else None,
        notify_prefix=str(data.get("notify_prefix", "[signal]")),
    )


def serialize_config(config: BacktestConfig) -> dict[str, Any]:
    payload = asdict(config)
    payload["mode"] = config.mode.value
    return payload
