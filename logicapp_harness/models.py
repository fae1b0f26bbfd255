# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
Data models for the Logic App test harness.

Contains the start-up inputs, the callback URL definition returned by the
runtime, the process state enum, and the Result type used by validation.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Generic, List, Optional, Tuple, TypeVar
from urllib.parse import quote_plus

from logicapp_harness.config import WORKFLOW_FILENAME

T = TypeVar("T")


@dataclass
class Result(Generic[T]):
    """
    Represents success or failure without raising.

    Validation returns these; the host turns failures into exceptions.
    """
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Get the value, raising ValueError if this is a failure."""
        if self.is_failure:
            raise ValueError(f"Cannot unwrap failure: {self.error}")
        return self.value


class ProcessState(Enum):
    """Lifecycle of the supervised runtime process."""
    NOT_STARTED = "not_started"
    STARTING = "starting"
    RUNNING = "running"
    FAILED = "failed"
    EXITED = "exited"


@dataclass(frozen=True)
class WorkflowInput:
    """A workflow definition to be written under a folder named after it."""
    workflow_name: str
    workflow_definition: str
    workflow_filename: str = WORKFLOW_FILENAME


@dataclass(frozen=True)
class StartupInputs:
    """Everything the runtime needs on disk before it is launched."""
    local_settings: Optional[str]
    host: Optional[str]
    workflows: Tuple[WorkflowInput, ...] = ()
    parameters: Optional[str] = None
    connections: Optional[str] = None
    artifacts_directory: Optional[Path] = None


@dataclass
class CallbackUrl:
    """
    Workflow trigger callback URL, as returned by listCallbackUrl.

    `value` never carries the relative path component; resolve it with
    `logicapp_harness.urls.resolve`.
    """
    value: str
    method: str
    base_path: str
    relative_path: Optional[str] = None
    relative_path_parameters: List[str] = field(default_factory=list)
    queries: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: dict) -> "CallbackUrl":
        return cls(
            value=payload["value"],
            method=payload.get("method", "POST"),
            base_path=payload["basePath"],
            relative_path=payload.get("relativePath"),
            relative_path_parameters=list(payload.get("relativePathParameters") or []),
            queries=dict(payload.get("queries") or {}),
        )

    @property
    def query_string(self) -> str:
        """The queries as a query string, without a leading question mark."""
        return "&".join(
            f"{quote_plus(key)}={quote_plus(value)}"
            for key, value in self.queries.items()
        )
