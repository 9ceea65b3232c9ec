"""Observers, notifications and result reporting."""

from trade_signal.monitoring.audit import AuditLog
from trade_signal.monitoring.notifier import LogNotifier, MemoryNotifier, Notifier
from trade_signal.monitoring.observers import (
    AuditObserver,
    NotifierObserver,
    NullObserver,
    SimulationObserver,
    SweepObserver,
)
from trade_signal.monitoring.report import format_summary, serialize_result

__all__ = [
    "AuditLog",
    "AuditObserver",
    "LogNotifier",
    "MemoryNotifier",
    "Notifier",
    "NotifierObserver",
    "NullObserver",
    "SimulationObserver",
    "SweepObserver",
    "format_summary",
    "serialize_result",
]
