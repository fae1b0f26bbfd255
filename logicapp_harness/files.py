# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
File I/O operations for the Logic App test harness.

Writes workflow definitions and settings payloads into the working directory
and mirrors the artifacts directory tree.
"""
import logging
import shutil
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Tuple

from logicapp_harness.config import (
    ARTIFACTS_DIR,
    CONNECTIONS_FILENAME,
    ENCODING_UTF8,
    HOST_FILENAME,
    LOCAL_SETTINGS_FILENAME,
    PARAMETERS_FILENAME,
)
from logicapp_harness.models import StartupInputs, WorkflowInput


def write_text_file(path: Path, content: str) -> Path:
    """Write UTF-8 text, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding=ENCODING_UTF8)
    return path


def materialize_workflows(workflows: Iterable[WorkflowInput], working_dir: Path) -> List[Path]:
    """
    Write each named workflow into a folder named after it.

    Workflows without a name are skipped.
    """
    written = []
    for workflow in workflows:
        if not workflow.workflow_name:
            continue
        file_path = working_dir / workflow.workflow_name / workflow.workflow_filename
        written.append(write_text_file(file_path, workflow.workflow_definition))
    return written


def copy_directory(source: Path, destination: Path) -> int:
    """
    Recursively copy the contents of source into destination.

    Symlinked directories are followed and copied in full wherever they
    appear. A directory that resolves to one of its own ancestors on the
    walk is skipped, so symlink cycles terminate.

    Returns the number of files copied.
    """
    copied = 0
    pending: List[Tuple[Path, Path, FrozenSet[Path]]] = [(source, destination, frozenset())]

    while pending:
        src_dir, dst_dir, ancestors = pending.pop()
        real_dir = src_dir.resolve()
        if real_dir in ancestors:
            logging.warning(f"Skipping symlink cycle at {src_dir}")
            continue
        ancestors = ancestors | {real_dir}

        dst_dir.mkdir(parents=True, exist_ok=True)
        for entry in sorted(src_dir.iterdir()):
            target = dst_dir / entry.name
            if entry.is_dir():
                pending.append((entry, target, ancestors))
            elif entry.is_file():
                shutil.copy2(entry, target)
                copied += 1

    return copied


def materialize_artifacts(artifacts_directory: Optional[Path], working_dir: Path) -> Optional[Path]:
    """Mirror the artifacts directory into `Artifacts/` under the working directory."""
    if artifacts_directory is None:
        return None

    artifacts_dir = working_dir / ARTIFACTS_DIR
    count = copy_directory(Path(artifacts_directory), artifacts_dir)
    logging.info(f"Copied {count} artifact file(s) from {artifacts_directory} to {artifacts_dir}")
    return artifacts_dir


def materialize_settings(inputs: StartupInputs, working_dir: Path) -> List[Path]:
    """
    Write the settings payloads that were supplied.

    Empty payloads are not written; the caller checks the required ones.
    """
    payloads = [
        (PARAMETERS_FILENAME, inputs.parameters),
        (CONNECTIONS_FILENAME, inputs.connections),
        (LOCAL_SETTINGS_FILENAME, inputs.local_settings),
        (HOST_FILENAME, inputs.host),
    ]

    written = []
    for filename, content in payloads:
        if content:
            written.append(write_text_file(working_dir / filename, content))
    return written


def materialize_working_directory(
    inputs: StartupInputs,
    workflows: Iterable[WorkflowInput],
    working_dir: Path,
) -> None:
    """Create the working directory and populate everything the runtime reads."""
    working_dir.mkdir(parents=True, exist_ok=False)
    materialize_workflows(workflows, working_dir)
    materialize_artifacts(inputs.artifacts_directory, working_dir)
    materialize_settings(inputs, working_dir)
