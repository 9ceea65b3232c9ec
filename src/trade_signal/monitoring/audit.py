"""Append-only NDJSON log for closed positions and realized trades."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class AuditLog:
    """One JSON object per line, stamped with the run id and config hash.

    Records written by one run can be told apart from another run appending
    to the same file through ``run_id``.
    """

    def __init__(self, path: str | Path, run_id: str | None = None, config_hash: str | None = None) -> None:
        self.path = Path(path)
        self.run_id = run_id
        self.config_hash = config_hash
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: str, payload: dict[str, Any]) -> None:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "run_id": self.run_id,
            "config_hash": self.config_hash,
            "event": event,
            "payload": payload,
        }
        with self.path.open("a", encoding="utf-8") as handle:
            # Datetimes and enums inside payloads fall back to str().
            handle.write(json.dumps(record, default=str) + "\n")

    def read(self, event: Optional[str] = None) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        records = []
        with self.path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                record = json.loads(line)
                if event is None or record.get("event") == event:
                    records.append(record)
        return records
