# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
Validation logic for the Logic App test harness.

Start-up inputs are checked here before anything is written to disk.
This module reports problems as Result values and never raises.
"""
from pathlib import Path
from typing import Iterable, List, Optional

from logicapp_harness.models import Result, WorkflowInput


def validate_filename(name: str) -> Result[str]:
    """
    Validate a single path segment (no directories).

    Workflow folder names and definition file names must stay inside the
    working directory.
    """
    if not name:
        return Result.failure("Filename cannot be empty.")

    if "/" in name or "\\" in name:
        return Result.failure(f"Filename cannot contain path separators: '{name}'")

    if name in (".", ".."):
        return Result.failure(f"Filename cannot be a relative directory reference: '{name}'")

    if len(name) >= 2 and name[1] == ":":
        return Result.failure(f"Windows drive paths not allowed: '{name}'")

    return Result.success(name)


def validate_workflows(workflows: Iterable[WorkflowInput]) -> Result[List[WorkflowInput]]:
    """
    Validate workflow inputs and drop the ones without a name.

    Unnamed workflows are skipped rather than rejected.
    """
    accepted = []
    for workflow in workflows:
        if not workflow.workflow_name:
            continue

        name_result = validate_filename(workflow.workflow_name)
        if name_result.is_failure:
            return Result.failure(f"Invalid workflow name: {name_result.error}")

        filename_result = validate_filename(workflow.workflow_filename)
        if filename_result.is_failure:
            return Result.failure(
                f"Invalid filename for workflow '{workflow.workflow_name}': {filename_result.error}"
            )

        accepted.append(workflow)

    return Result.success(accepted)


def validate_required_setting(content: Optional[str], filename: str) -> Result[str]:
    """Required settings payloads must be present and non-empty."""
    if not content:
        return Result.failure(
            f"The {filename} file is not provided or its path not found. "
            f"This file is needed for the unit testing."
        )
    return Result.success(content)


def validate_artifacts_directory(directory: Optional[Path]) -> Result[Optional[Path]]:
    """An artifacts directory is optional, but must exist when declared."""
    if directory is None:
        return Result.success(None)

    directory = Path(directory)
    if not directory.is_dir():
        return Result.failure(f"Artifacts directory not found: {directory.resolve()}")

    return Result.success(directory)
