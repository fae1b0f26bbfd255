"""
Shared fixtures for the Logic App test harness tests.

Integration tests run a stub `func` executable (a small Python script) from
a temporary search path instead of the real Azure Functions Core Tools.
"""

import sys
from pathlib import Path

import pytest

from logicapp_harness.config import RuntimeSettings
from logicapp_harness.models import StartupInputs, WorkflowInput


STUB_EXECUTABLE = "func"


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Directory used as the runtime search path."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Base directory under which hosts create their working directories."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def write_stub(bin_dir: Path):
    """Helper fixture that installs a stub runtime executable."""
    def _write(body: str) -> Path:
        stub = bin_dir / STUB_EXECUTABLE
        stub.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
        stub.chmod(0o755)
        return stub
    return _write


@pytest.fixture
def runtime_settings(bin_dir: Path, work_dir: Path) -> RuntimeSettings:
    """Settings pointing at the stub search path with fast timeouts."""
    return RuntimeSettings(
        executable_name=STUB_EXECUTABLE,
        search_path=str(bin_dir),
        base_directory=work_dir,
        startup_timeout_s=30,
        cleanup_attempts=2,
        cleanup_delay_s=0,
        kill_stale_processes=False,
    )


@pytest.fixture
def startup_inputs() -> StartupInputs:
    """Minimal inputs: empty-but-present settings and one workflow."""
    return StartupInputs(
        local_settings="{}",
        host="{}",
        workflows=(
            WorkflowInput(
                workflow_name="http-echo",
                workflow_definition='{"definition": {"triggers": {}}}',
            ),
        ),
    )
