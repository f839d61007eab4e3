"""Effect audit trail — persisted outcomes of feedback actions.

Every action run by a feedback migration produces one record: its result and
the destination effects it recorded. Records are appended to a JSONL file so
the history of what a migration changed, and why, can be reviewed later.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from refsync.effects import DestinationEffect
from refsync.feedback.action import FeedbackRun


@dataclass
class EffectRecord:
    """Auditable record of one action outcome."""

    feedback_name: str
    action_name: str
    result: str  # success | noop | error
    ref: str | None = None
    message: str | None = None
    recorded_at: str = ""  # ISO 8601 timestamp
    effects: list[DestinationEffect] = field(default_factory=list)


class EffectStore:
    """Stores and retrieves effect records for a working directory."""

    STORE_DIR = ".refsync"
    STORE_FILE = "effects.jsonl"

    def __init__(self, base_path: str | Path):
        self.base_path = Path(base_path)
        self.store_dir = self.base_path / self.STORE_DIR
        self.store_file = self.store_dir / self.STORE_FILE

    def record(self, record: EffectRecord) -> None:
        """Append an effect record."""
        self.store_dir.mkdir(parents=True, exist_ok=True)

        if not record.recorded_at:
            record.recorded_at = datetime.now(timezone.utc).isoformat()

        entry = {
            "feedback_name": record.feedback_name,
            "action_name": record.action_name,
            "ref": record.ref,
            "result": record.result,
            "message": record.message,
            "recorded_at": record.recorded_at,
            "effects": [e.to_dict() for e in record.effects],
        }

        with open(self.store_file, "a") as f:
            f.write(json.dumps(entry) + "\n")

    def record_run(self, run: FeedbackRun) -> list[EffectRecord]:
        """Append one record per action outcome of *run*."""
        records = []
        for outcome in run.outcomes:
            record = EffectRecord(
                feedback_name=run.feedback_name,
                action_name=outcome.action_name,
                ref=run.ref,
                result=outcome.result.kind.value,
                message=outcome.result.message,
                effects=list(outcome.effects),
            )
            self.record(record)
            records.append(record)
        return records

    def get_history(self, feedback_name: str | None = None) -> list[EffectRecord]:
        """Retrieve effect records, optionally filtered by feedback name."""
        if not self.store_file.exists():
            return []

        records = []
        with open(self.store_file) as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                data = json.loads(line)
                if feedback_name and data.get("feedback_name") != feedback_name:
                    continue
                records.append(
                    EffectRecord(
                        feedback_name=data["feedback_name"],
                        action_name=data["action_name"],
                        result=data["result"],
                        ref=data.get("ref"),
                        message=data.get("message"),
                        recorded_at=data.get("recorded_at", ""),
                        effects=[DestinationEffect.from_dict(e) for e in data.get("effects", [])],
                    )
                )
        return records

