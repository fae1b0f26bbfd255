# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
Unit Tests for lifecycle logging.
"""
import json
from pathlib import Path
from unittest.mock import patch

from logicapp_harness.lifecycle import HostLifecycleContext, generate_host_id


def logged_record(mock_logging) -> dict:
    message = mock_logging.info.call_args[0][0]
    assert message.startswith("LIFECYCLE: ")
    return json.loads(message[len("LIFECYCLE: "):])


class TestHostLifecycleContext:
    """Tests for HostLifecycleContext structured records."""

    def setup_method(self):
        self.context = HostLifecycleContext(
            host_id="abc12345",
            working_directory=Path("/tmp/run"),
            workflow_count=2,
            executable="/usr/bin/func",
            pid=99,
        )

    @patch('logicapp_harness.lifecycle.logging')
    def test_started_includes_rounded_duration(self, mock_logging):
        self.context.log_started(1234.5678)

        record = logged_record(mock_logging)
        assert record["event"] == "runtime_started"
        assert record["duration_ms"] == 1234.57
        assert record["pid"] == 99
        assert record["working_directory"] == str(Path("/tmp/run"))

    @patch('logicapp_harness.lifecycle.logging')
    def test_failed_includes_error(self, mock_logging):
        self.context.log_failed("Runtime did not start")

        record = logged_record(mock_logging)
        assert record["event"] == "runtime_failed"
        assert record["error"] == "Runtime did not start"
        assert "duration_ms" not in record

    @patch('logicapp_harness.lifecycle.logging')
    def test_closed_reports_directory_removal(self, mock_logging):
        self.context.log_closed(directory_removed=False)

        record = logged_record(mock_logging)
        assert record["event"] == "runtime_closed"
        assert record["directory_removed"] is False

    def test_host_ids_are_short_and_unique(self):
        ids = {generate_host_id() for _ in range(50)}

        assert len(ids) == 50
        assert all(len(host_id) == 8 for host_id in ids)
