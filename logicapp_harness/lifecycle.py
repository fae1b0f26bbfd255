# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
Lifecycle logging for the Logic App test host.

Emits one structured JSON record per lifecycle transition so test runs can
be correlated with the runtime process and working directory they used.
"""
import json
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def generate_host_id() -> str:
    """Generate a short id for log correlation."""
    return str(uuid.uuid4())[:8]


@dataclass
class HostLifecycleContext:
    """
    Context for lifecycle logging.

    Created when the host starts and reused until it is closed.
    """
    host_id: str
    working_directory: Path
    workflow_count: int
    executable: Optional[str] = None
    pid: Optional[int] = None

    def log_starting(self) -> None:
        self._log("runtime_starting")

    def log_started(self, duration_ms: float) -> None:
        self._log("runtime_started", duration_ms=round(duration_ms, 2))

    def log_failed(self, error: str) -> None:
        self._log("runtime_failed", error=error)

    def log_closed(self, directory_removed: bool) -> None:
        self._log("runtime_closed", directory_removed=directory_removed)

    def _log(
        self,
        event_type: str,
        duration_ms: Optional[float] = None,
        error: Optional[str] = None,
        directory_removed: Optional[bool] = None,
    ) -> None:
        """Emit structured lifecycle log."""
        data = {
            "event": event_type,
            "host_id": self.host_id,
            "working_directory": str(self.working_directory),
            "workflow_count": self.workflow_count,
            "executable": self.executable,
            "pid": self.pid,
        }

        if duration_ms is not None:
            data["duration_ms"] = duration_ms
        if error is not None:
            data["error"] = error
        if directory_removed is not None:
            data["directory_removed"] = directory_removed

        logging.info(f"LIFECYCLE: {json.dumps(data)}")
