# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
Process utilities for the Logic App test harness.

Locates the runtime executable, kills runtime processes, and removes
working directories. Every kill and cleanup helper here is best-effort
and logs instead of raising.
"""
import logging
import os
import shutil
import subprocess
import time
from pathlib import Path
from typing import Optional

import psutil

from logicapp_harness.config import IS_WINDOWS, PROCESS_KILL_WAIT_S
from logicapp_harness.errors import ToolNotFoundError
from logicapp_harness.models import Result


def find_runtime_executable(executable_name: str, search_path: Optional[str] = None) -> Result[str]:
    """
    Search each entry of the search path for the runtime executable.

    Uses PATH when no search path is given.
    """
    if search_path is None:
        search_path = os.environ.get("PATH", "")

    exe_path = shutil.which(executable_name, path=search_path)
    if not exe_path:
        return Result.failure(
            f"Environment variables do not have the '{executable_name}' executable path added."
        )

    logging.info(f"Path for Azure Functions Core Tools: {exe_path}")
    return Result.success(exe_path)


def require_runtime_executable(executable_name: str, search_path: Optional[str] = None) -> str:
    """Like find_runtime_executable, but raises ToolNotFoundError."""
    result = find_runtime_executable(executable_name, search_path)
    if result.is_failure:
        raise ToolNotFoundError(result.error)
    return result.value


def process_group_kwargs() -> dict:
    """Popen arguments that put the runtime in its own process group."""
    if IS_WINDOWS:
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def kill_process_tree(pid: int) -> None:
    """Kill a process and all of its descendants."""
    try:
        parent = psutil.Process(pid)
        processes = parent.children(recursive=True) + [parent]
    except psutil.NoSuchProcess:
        return
    except psutil.AccessDenied as e:
        logging.warning(f"Cannot inspect process {pid}: {e}")
        return

    for process in processes:
        try:
            process.kill()
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            logging.warning(f"Failed to kill process {process.pid}: {e}")

    _, alive = psutil.wait_procs(processes, timeout=PROCESS_KILL_WAIT_S)
    for process in alive:
        logging.warning(f"Process {process.pid} still running after kill")


def kill_runtime_processes(executable_name: str) -> int:
    """
    Kill every process whose name matches the runtime executable.

    Returns the number of process trees killed.
    """
    killed = 0
    for process in psutil.process_iter(["name"]):
        if process.info["name"] != executable_name:
            continue
        logging.info(f"Killing runtime process {process.pid} ({executable_name})")
        kill_process_tree(process.pid)
        killed += 1
    return killed


def remove_working_directory(working_dir: Path, attempts: int, delay_s: float) -> bool:
    """
    Remove the working directory, retrying while the OS releases file locks.

    Returns False once all attempts fail; the directory is then left behind.
    """
    for attempt in range(1, attempts + 1):
        if not working_dir.exists():
            return True
        try:
            shutil.rmtree(working_dir)
            return True
        except OSError as e:
            logging.warning(
                f"Failed to remove {working_dir} (attempt {attempt}/{attempts}): {e}"
            )
            if attempt < attempts:
                time.sleep(delay_s)

    logging.warning(f"Giving up on removing {working_dir}")
    return False
