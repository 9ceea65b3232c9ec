"""CSV ingestion and fixed-bucket resampling."""

from __future__ import annotations

import csv
import math
from datetime import datetime, timedelta, timezone
from pathlib import Path

from trade_signal.data.models import Sample

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: str) -> datetime:
    raw = value.strip()
    if raw.endswith("Z") or raw.endswith("z"):
        raw = raw[:-1] + "+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def load_samples(path: str | Path) -> list[Sample]:
    """Read ``timestamp,price`` rows from a CSV file with a header line."""
    path = Path(path)
    samples: list[Sample] = []
    with path.open("r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        for line_no, row in enumerate(reader, start=2):
            time_raw = row.get("timestamp") or row.get("time")
            price_raw = row.get("price") or row.get("close")
            if not time_raw or price_raw is None or price_raw == "":
                raise ValueError(f"{path}:{line_no}: expected timestamp and price columns")
            try:
                time = parse_timestamp(time_raw)
                price = float(price_raw)
            except ValueError as exc:
                raise ValueError(f"{path}:{line_no}: {exc}") from exc
            samples.append(Sample(time=time, price=price))
    return samples


def resample_to_close(samples: list[Sample], step: timedelta) -> list[Sample]:
    """Keep the latest observation of each epoch-aligned bucket of width ``step``.

    The returned sample carries the timestamp of that observation, not the
    bucket start.
    """
    step_seconds = int(step.total_seconds())
    if step_seconds <= 0:
        raise ValueError("step must be at least one second")

    buckets: dict[int, Sample] = {}
    for sample in samples:
        offset = math.floor((sample.time - _EPOCH).total_seconds())
        bucket = (offset // step_seconds) * step_seconds
        previous = buckets.get(bucket)
        if previous is None or sample.time > previous.time:
            buckets[bucket] = sample
    return [buckets[key] for key in sorted(buckets)]


def resample_to_n_hours(samples: list[Sample], hours: int) -> list[Sample]:
    if hours <= 0:
        raise ValueError("hours must be >= 1")
    return resample_to_close(samples, timedelta(hours=hours))


def resample_to_hourly(samples: list[Sample]) -> list[Sample]:
    return resample_to_n_hours(samples, 1)
