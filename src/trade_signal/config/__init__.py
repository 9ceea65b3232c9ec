"""Config loading and freezing."""

from trade_signal.config.loader import (
    compute_config_hash,
    freeze_config,
    load_config,
    read_config_lock,
    serialize_config,
    verify_config_lock,
)
from trade_signal.config.models import (
    BacktestConfig,
    FilterSettings,
    MonitoringConfig,
    SimulatorMode,
    StrategySettings,
    SweepSettings,
    VolatilitySettings,
)

__all__ = [
    "BacktestConfig",
    "FilterSettings",
    "MonitoringConfig",
    "SimulatorMode",
    "StrategySettings",
    "SweepSettings",
    "VolatilitySettings",
    "compute_config_hash",
    "freeze_config",
    "load_config",
    "read_config_lock",
    "serialize_config",
    "verify_config_lock",
]
