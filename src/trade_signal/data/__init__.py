"""Price samples, ingestion and resampling."""

from trade_signal.data.loader import (
    load_samples,
    parse_timestamp,
    resample_to_close,
    resample_to_hourly,
    resample_to_n_hours,
)
from trade_signal.data.models import InsufficientDataError, Sample

__all__ = [
    "InsufficientDataError",
    "Sample",
    "load_samples",
    "parse_timestamp",
    "resample_to_close",
    "resample_to_hourly",
    "resample_to_n_hours",
]
