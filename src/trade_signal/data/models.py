"""Price sample model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Sample:
    time: datetime
    price: float


class InsufficientDataError(ValueError):
    """Raised when a series is shorter than an indicator or simulator needs."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(f"Not enough data: need at least {required} samples, got {available}")
        self.required = required
        self.available = available

    def __reduce__(self):
        return (type(self), (self.required, self.available))
