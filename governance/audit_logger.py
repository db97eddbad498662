"""Structured JSONL audit logger for dependency edits."""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


class AuditLogger:
    """Writes dependency edit audit records as JSON lines."""

    def __init__(self, log_path: Path) -> None:
        self.log_path = log_path
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger("tg.audit")

    @staticmethod
    def _hash_inputs(inputs: dict[str, Any]) -> str:
        payload = json.dumps(inputs, sort_keys=True, default=str).encode("utf-8")
        return hashlib.sha256(payload).hexdigest()

    def log(
        self,
        action: str,
        task_id: Any,
        inputs: dict[str, Any],
        outcome: str,
        allowed: bool,
        reason: str = "",
    ) -> None:
        """Append one JSONL audit event."""
        event = {
            "timestamp": datetime.now(UTC).isoformat(),
            "action": action,
            "task_id": task_id,
            "inputs_hash": self._hash_inputs(inputs),
            "outcome": outcome,
            "allowed": allowed,
            "reason": reason,
        }
        with self.log_path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(event, ensure_ascii=True, default=str) + "\n")
        self.logger.info(json.dumps(event, ensure_ascii=True, default=str))

    def record_event(self, event_name: str, payload: dict[str, Any]) -> None:
        """Event bus handler translating editor events into audit lines."""
        if event_name == "dependencies.rejected":
            self.log(
                action=str(payload.get("action", event_name)),
                task_id=payload.get("task_id"),
                inputs={"dependency_ids": payload.get("dependency_ids")},
                outcome=str(payload.get("error", "rejected")),
                allowed=False,
                reason=str(payload.get("reason", "")),
            )
            return
        if event_name == "derived.degraded":
            self.log(
                action=event_name,
                task_id=payload.get("task_id"),
                inputs={"cycle": payload.get("cycle")},
                outcome="degraded",
                allowed=True,
                reason=str(payload.get("reason", "")),
            )
            return
        self.log(
            action=event_name,
            task_id=payload.get("task_id"),
            inputs={"dependency_ids": payload.get("dependency_ids")},
            outcome="degraded" if payload.get("degraded") else "applied",
            allowed=True,
        )
