# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
Configuration constants for the Logic App test harness.

All fixed host names, ports, paths, timeouts and file names are centralized
here. The two frozen dataclasses at the bottom carry the values tests may
substitute; everything else reads them instead of the module constants.
"""
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

# =============================================================================
# Runtime Endpoints
# =============================================================================
RUNTIME_PORT = 7071
MOCK_PORT = 7075
URI_SCHEME = "http"
LOOPBACK_HOST_NAME = "localhost"

# =============================================================================
# Management API Paths
# =============================================================================
WORKFLOW_EXTENSION_BASE_PATH = "/runtime/webhooks/workflow"
MANAGEMENT_BASE_PATH = f"{WORKFLOW_EXTENSION_BASE_PATH}/api/management"
WORKFLOW_MANAGEMENT_BASE_PATH = f"{MANAGEMENT_BASE_PATH}/workflows"

# =============================================================================
# API Versions
# =============================================================================
API_VERSION_2019_10_01_EDGE_PREVIEW = "2019-10-01-edge-preview"
API_VERSION_2020_05_01_PREVIEW = "2020-05-01-preview"

# =============================================================================
# Runtime Process
# =============================================================================
RUNTIME_EXECUTABLE = "func"
RUNTIME_EXECUTABLE_WINDOWS = "func.exe"
RUNTIME_START_ARGUMENTS: Tuple[str, ...] = ("start", "--verbose")
READY_MARKER = "Host started"

# =============================================================================
# Timeouts and Retries
# =============================================================================
STARTUP_TIMEOUT_S = 120
CLEANUP_ATTEMPTS = 5
CLEANUP_DELAY_S = 5
PROCESS_KILL_WAIT_S = 10

# =============================================================================
# Working Directory File Names
# =============================================================================
LOCAL_SETTINGS_FILENAME = "local.settings.json"
HOST_FILENAME = "host.json"
PARAMETERS_FILENAME = "parameters.json"
CONNECTIONS_FILENAME = "connections.json"
WORKFLOW_FILENAME = "workflow.json"
ARTIFACTS_DIR = "Artifacts"

# =============================================================================
# Encodings
# =============================================================================
ENCODING_UTF8 = "utf-8"

# =============================================================================
# User-facing Messages
# =============================================================================
STARTUP_HINT = (
    "Please make sure you have the latest Azure Functions Core Tools installed "
    "and available on your PATH environment variable, and that Azurite is up "
    "and running."
)

IS_WINDOWS = platform.system() == "Windows"


def default_host_name() -> str:
    """Machine name on Windows, loopback name everywhere else."""
    if IS_WINDOWS:
        return os.environ.get("COMPUTERNAME") or platform.node()
    return LOOPBACK_HOST_NAME


def default_executable_name() -> str:
    return RUNTIME_EXECUTABLE_WINDOWS if IS_WINDOWS else RUNTIME_EXECUTABLE


@dataclass(frozen=True)
class HostEnvironment:
    """
    Where the local runtime listens and which management API version to use.

    Created once and passed to every URL builder, so tests can point the
    harness at any host or port.
    """
    host_name: str = field(default_factory=default_host_name)
    management_host_name: str = field(default_factory=default_host_name)
    port: int = RUNTIME_PORT
    mock_port: int = MOCK_PORT
    api_version: str = API_VERSION_2019_10_01_EDGE_PREVIEW

    @classmethod
    def default(cls) -> "HostEnvironment":
        return cls()

    @property
    def base_url(self) -> str:
        return f"{URI_SCHEME}://{self.host_name}:{self.port}"

    @property
    def mock_base_url(self) -> str:
        return f"{URI_SCHEME}://{self.host_name}:{self.mock_port}"

    @property
    def management_host_url(self) -> str:
        return f"{URI_SCHEME}://{self.management_host_name}:{self.port}"

    @property
    def management_base_url(self) -> str:
        return self.base_url + MANAGEMENT_BASE_PATH

    @property
    def workflow_management_base_url(self) -> str:
        return self.base_url + WORKFLOW_MANAGEMENT_BASE_PATH

    @property
    def workflow_management_base_url_with_management_host(self) -> str:
        return self.management_host_url + WORKFLOW_MANAGEMENT_BASE_PATH


@dataclass(frozen=True)
class RuntimeSettings:
    """How the runtime process is located, started, awaited and cleaned up."""
    executable_name: str = field(default_factory=default_executable_name)
    start_arguments: Tuple[str, ...] = RUNTIME_START_ARGUMENTS
    ready_marker: str = READY_MARKER
    startup_timeout_s: float = STARTUP_TIMEOUT_S
    cleanup_attempts: int = CLEANUP_ATTEMPTS
    cleanup_delay_s: float = CLEANUP_DELAY_S
    # None means the PATH environment variable at start-up time
    search_path: Optional[str] = None
    # None means the current working directory at start-up time
    base_directory: Optional[Path] = None
    kill_stale_processes: bool = True
