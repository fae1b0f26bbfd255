# Copyright (c) 2025 Microsoft Corporation.
# Licensed under the MIT License. See LICENSE file in the project root.
"""
Workflow test host.

Starts the Azure Functions runtime in a freshly materialized working
directory, waits for it to report readiness, and tears everything down
again when the test is done.
"""
import concurrent.futures
import logging
import subprocess
import threading
import time
import uuid
from pathlib import Path
from typing import IO, List, Optional

from logicapp_harness.config import (
    ENCODING_UTF8,
    HOST_FILENAME,
    LOCAL_SETTINGS_FILENAME,
    PROCESS_KILL_WAIT_S,
    STARTUP_HINT,
    RuntimeSettings,
)
from logicapp_harness.errors import (
    ArtifactsDirectoryNotFoundError,
    ConfigurationMissingError,
    HarnessError,
    InvalidWorkflowNameError,
    RuntimeStartupError,
)
from logicapp_harness.execution import (
    kill_process_tree,
    kill_runtime_processes,
    process_group_kwargs,
    remove_working_directory,
    require_runtime_executable,
)
from logicapp_harness.lifecycle import HostLifecycleContext, generate_host_id
from logicapp_harness.models import ProcessState, StartupInputs, WorkflowInput
from logicapp_harness import files as files_module
from logicapp_harness import validation


class WorkflowTestHost:
    """
    Supervises one runtime process and the working directory it runs in.

    Use as a context manager, or call start() and close() explicitly.
    close() is idempotent.
    """

    def __init__(
        self,
        inputs: StartupInputs,
        settings: Optional[RuntimeSettings] = None,
        write_startup_logs: bool = False,
    ):
        self.inputs = inputs
        self.settings = settings or RuntimeSettings()
        # Start-up output is verbose, so it is only logged on request
        self.write_startup_logs = write_startup_logs

        base_directory = self.settings.base_directory or Path.cwd()
        self.working_directory = Path(base_directory) / str(uuid.uuid4())

        self._output_data: List[str] = []
        self._error_data: List[str] = []
        self._lock = threading.Lock()
        self._process: Optional[subprocess.Popen] = None
        self._readers: List[threading.Thread] = []
        self._ready: "concurrent.futures.Future[bool]" = concurrent.futures.Future()
        self._state = ProcessState.NOT_STARTED
        self._closed = False
        self._lifecycle = HostLifecycleContext(
            host_id=generate_host_id(),
            working_directory=self.working_directory,
            workflow_count=len(inputs.workflows),
        )

    def __enter__(self) -> "WorkflowTestHost":
        return self.start()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def state(self) -> ProcessState:
        if self._state is ProcessState.RUNNING and self._process.poll() is not None:
            self._state = ProcessState.EXITED
        return self._state

    @property
    def output_data(self) -> List[str]:
        """Runtime stdout lines captured so far, in emission order."""
        with self._lock:
            return list(self._output_data)

    @property
    def error_data(self) -> List[str]:
        """Runtime stderr lines captured so far, in emission order."""
        with self._lock:
            return list(self._error_data)

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process else None

    # =========================================================================
    # Start-up
    # =========================================================================

    def start(self) -> "WorkflowTestHost":
        """
        Materialize the working directory and start the runtime.

        Blocks until the runtime reports readiness or the start-up timeout
        elapses. On any failure the process is killed and the working
        directory removed before the error propagates.
        """
        if self._closed:
            raise HarnessError("Runtime host is closed and cannot be started")
        if self._state is not ProcessState.NOT_STARTED:
            raise HarnessError(f"Runtime host cannot be started from state '{self._state.value}'")
        self._state = ProcessState.STARTING
        start_time = time.time()

        try:
            if self.settings.kill_stale_processes:
                kill_runtime_processes(self.settings.executable_name)
            workflows = self._validate_inputs()
            executable = require_runtime_executable(
                self.settings.executable_name, self.settings.search_path
            )
        except Exception as e:
            self._state = ProcessState.FAILED
            self._lifecycle.log_failed(str(e))
            raise

        self._lifecycle.executable = executable
        self._lifecycle.log_starting()

        try:
            files_module.materialize_working_directory(self.inputs, workflows, self.working_directory)
            self._launch(executable)
            self._wait_until_ready()
        except Exception as e:
            self._state = ProcessState.FAILED
            logging.error(f"Runtime start-up failed: {e}")
            self._lifecycle.log_failed(str(e))
            self._release()
            raise

        self._state = ProcessState.RUNNING
        self._lifecycle.log_started((time.time() - start_time) * 1000)
        return self

    def _validate_inputs(self) -> List[WorkflowInput]:
        """Check every input before anything is written to disk."""
        for content, filename in (
            (self.inputs.local_settings, LOCAL_SETTINGS_FILENAME),
            (self.inputs.host, HOST_FILENAME),
        ):
            setting_result = validation.validate_required_setting(content, filename)
            if setting_result.is_failure:
                raise ConfigurationMissingError(setting_result.error)

        artifacts_result = validation.validate_artifacts_directory(self.inputs.artifacts_directory)
        if artifacts_result.is_failure:
            raise ArtifactsDirectoryNotFoundError(artifacts_result.error)

        workflows_result = validation.validate_workflows(self.inputs.workflows)
        if workflows_result.is_failure:
            raise InvalidWorkflowNameError(workflows_result.error)

        return workflows_result.value

    def _launch(self, executable: str) -> None:
        """Start the runtime with stdout and stderr read line by line."""
        self._process = subprocess.Popen(
            [executable, *self.settings.start_arguments],
            cwd=str(self.working_directory),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding=ENCODING_UTF8,
            errors="replace",
            bufsize=1,
            **process_group_kwargs(),
        )
        self._lifecycle.pid = self._process.pid
        logging.info(f"Started runtime process {self._process.pid} in {self.working_directory}")

        self._readers = [
            threading.Thread(
                target=self._read_output,
                args=(self._process.stdout,),
                name=f"runtime-stdout-{self._lifecycle.host_id}",
                daemon=True,
            ),
            threading.Thread(
                target=self._read_errors,
                args=(self._process.stderr,),
                name=f"runtime-stderr-{self._lifecycle.host_id}",
                daemon=True,
            ),
        ]
        for reader in self._readers:
            reader.start()

    def _read_output(self, stream: IO[str]) -> None:
        """Capture stdout and resolve the readiness future exactly once."""
        try:
            for line in stream:
                line = line.rstrip("\r\n")
                with self._lock:
                    self._output_data.append(line)
                    started = self._ready.done()
                    if not started and self.settings.ready_marker in line:
                        self._ready.set_result(True)

                if started or self.write_startup_logs:
                    logging.info(f"[runtime] {line}")
        except (ValueError, OSError) as e:
            logging.debug(f"Runtime stdout reader stopped: {e}")
        finally:
            with self._lock:
                if not self._ready.done():
                    self._ready.set_result(False)

    def _read_errors(self, stream: IO[str]) -> None:
        try:
            for line in stream:
                line = line.rstrip("\r\n")
                with self._lock:
                    self._error_data.append(line)
                logging.warning(f"[runtime] {line}")
        except (ValueError, OSError) as e:
            logging.debug(f"Runtime stderr reader stopped: {e}")

    def _wait_until_ready(self) -> None:
        timeout_s = self.settings.startup_timeout_s
        try:
            started = self._ready.result(timeout=timeout_s)
        except concurrent.futures.TimeoutError:
            raise RuntimeStartupError(
                f"Runtime did not start within {timeout_s}s. {STARTUP_HINT}",
                error_output=self._last_error_line(),
            )

        if not started or self._process.poll() is not None:
            # The process is gone, so let the stderr reader drain first
            self._join_readers(PROCESS_KILL_WAIT_S)
            error_output = self._last_error_line()
            raise RuntimeStartupError(
                f"Runtime did not start properly. The error is '{error_output or ''}'. {STARTUP_HINT}",
                error_output=error_output,
            )

    def _last_error_line(self) -> Optional[str]:
        with self._lock:
            for line in reversed(self._error_data):
                if line.strip():
                    return line
        return None

    # =========================================================================
    # Teardown
    # =========================================================================

    def _join_readers(self, timeout_s: float) -> None:
        for reader in self._readers:
            if reader.is_alive():
                reader.join(timeout_s)

    def _terminate(self) -> None:
        """Kill the runtime process tree and release its pipes."""
        process = self._process
        if process is None:
            return

        if process.poll() is None:
            kill_process_tree(process.pid)
        try:
            process.wait(timeout=PROCESS_KILL_WAIT_S)
        except subprocess.TimeoutExpired:
            logging.warning(f"Runtime process {process.pid} did not exit after kill")

        self._join_readers(PROCESS_KILL_WAIT_S)
        for stream in (process.stdout, process.stderr):
            if stream is not None:
                try:
                    stream.close()
                except OSError as e:
                    logging.warning(f"Failed to close runtime stream: {e}")

    def _release(self) -> bool:
        """
        Best-effort teardown shared by close() and failed start-up.

        Returns True when the working directory was removed.
        """
        try:
            self._terminate()
        except Exception as e:
            logging.warning(f"Failed to terminate runtime process: {e}")

        if self.settings.kill_stale_processes:
            try:
                kill_runtime_processes(self.settings.executable_name)
            except Exception as e:
                logging.warning(f"Failed to kill leftover runtime processes: {e}")

        try:
            return remove_working_directory(
                self.working_directory,
                self.settings.cleanup_attempts,
                self.settings.cleanup_delay_s,
            )
        except Exception as e:
            logging.warning(f"Failed to remove working directory {self.working_directory}: {e}")
            return False

    def close(self) -> None:
        """
        Stop the runtime and delete the working directory.

        Each step is best-effort; failures are logged and never raised, so
        teardown cannot break a test run.
        """
        if self._closed:
            return
        self._closed = True

        if self._state is ProcessState.NOT_STARTED:
            return

        removed = self._release()

        if self._state in (ProcessState.STARTING, ProcessState.RUNNING):
            self._state = ProcessState.EXITED
        self._lifecycle.log_closed(removed)
