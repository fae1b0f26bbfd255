# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
Unit Tests for start-up input validation.
"""
import pytest

from logicapp_harness.models import Result, WorkflowInput
from logicapp_harness.validation import (
    validate_artifacts_directory,
    validate_filename,
    validate_required_setting,
    validate_workflows,
)


class TestValidateFilename:
    """Tests for validate_filename() - single path segment checks."""

    @pytest.mark.parametrize("name", ["orders", "Order-Processing_v2", "workflow.json", ".hidden"])
    def test_accepts_plain_names(self, name):
        assert validate_filename(name).value == name

    @pytest.mark.parametrize("name", ["", "a/b", "a\\b", ".", "..", "C:evil"])
    def test_rejects_names_escaping_the_directory(self, name):
        assert validate_filename(name).is_failure


class TestValidateWorkflows:
    """Tests for validate_workflows()."""

    def test_drops_unnamed_workflows(self):
        result = validate_workflows([WorkflowInput("", "{}"), WorkflowInput("wf", "{}")])

        assert [w.workflow_name for w in result.value] == ["wf"]

    def test_rejects_traversal_in_workflow_name(self):
        result = validate_workflows([WorkflowInput("../outside", "{}")])

        assert result.is_failure
        assert "Invalid workflow name" in result.error

    def test_rejects_traversal_in_filename(self):
        result = validate_workflows([WorkflowInput("wf", "{}", "../workflow.json")])

        assert result.is_failure
        assert "'wf'" in result.error


class TestValidateRequiredSetting:
    """Tests for validate_required_setting()."""

    def test_accepts_empty_json_object(self):
        assert validate_required_setting("{}", "host.json").is_success

    @pytest.mark.parametrize("content", [None, ""])
    def test_rejects_missing_content(self, content):
        result = validate_required_setting(content, "local.settings.json")

        assert result.is_failure
        assert "local.settings.json" in result.error


class TestValidateArtifactsDirectory:
    """Tests for validate_artifacts_directory()."""

    def test_none_is_allowed(self):
        assert validate_artifacts_directory(None) == Result.success(None)

    def test_existing_directory_is_returned(self, tmp_path):
        assert validate_artifacts_directory(tmp_path).value == tmp_path

    def test_missing_directory_fails(self, tmp_path):
        result = validate_artifacts_directory(tmp_path / "missing")

        assert result.is_failure
        assert "missing" in result.error

    def test_file_is_not_a_directory(self, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")

        assert validate_artifacts_directory(file_path).is_failure


class TestResult:
    """Tests for Result.unwrap()."""

    def test_unwrap_failure_raises(self):
        with pytest.raises(ValueError):
            Result.failure("nope").unwrap()

    def test_unwrap_success_returns_value(self):
        assert Result.success(3).unwrap() == 3
