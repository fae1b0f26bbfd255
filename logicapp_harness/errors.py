# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""Exceptions raised by the Logic App test harness."""
from typing import Optional


class HarnessError(Exception):
    """Base class for all harness errors."""


class ConfigurationMissingError(HarnessError):
    """A required settings payload (local.settings.json, host.json) was not supplied."""


class ToolNotFoundError(HarnessError):
    """The runtime executable could not be found on the search path."""


class ArtifactsDirectoryNotFoundError(HarnessError, FileNotFoundError):
    """The declared artifacts source directory does not exist."""


class InvalidWorkflowNameError(HarnessError, ValueError):
    """A workflow name would place its definition outside the working directory."""


class DuplicateQueryParameterError(HarnessError, ValueError):
    """A query parameter being merged already exists on the callback URL."""


class RuntimeStartupError(HarnessError):
    """The runtime timed out or exited before reporting readiness."""

    def __init__(self, message: str, error_output: Optional[str] = None):
        super().__init__(message)
        self.error_output = error_output
