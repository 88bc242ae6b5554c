"""Subprocess runner for one external program invocation."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager, suppress
from dataclasses import dataclass, field

from tf_external.config import InvokerSettings
from tf_external.errors import ExecutionError
from tf_external.models import ACTION_ENV_VAR, Action, FailureKind
from tf_external.resolver import ResolvedProgram

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Cancellation:
    """Caller-supplied bound on how long an operation may wait.

    ``timeout_seconds`` becomes an absolute deadline when the object is built,
    so every invocation sharing it (both steps of an update) counts against
    the same budget. ``cancel_requested`` is polled while waiting and aborts
    when it returns True.
    """

    timeout_seconds: float | None = None
    cancel_requested: Callable[[], bool] | None = None
    deadline: float | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        if self.timeout_seconds:
            self.deadline = time.monotonic() + self.timeout_seconds

    @property
    def is_unbounded(self) -> bool:
        return self.deadline is None and self.cancel_requested is None

    def reason(self) -> str | None:
        """Return why the invocation must stop, or None to keep waiting."""

        if self.deadline is not None and time.monotonic() >= self.deadline:
            return f"deadline of {self.timeout_seconds:g}s exceeded"
        if self.cancel_requested is not None and self.cancel_requested():
            return "cancellation requested"
        return None


@dataclass(slots=True)
class InvocationOutput:
    """Captured streams of a successful invocation."""

    stdout: bytes
    stderr: bytes
    exit_code: int


class _Cancelled(Exception):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def build_environment(action: Action, base: dict[str, str] | None = None) -> dict[str, str]:
    """Copy the environment and set or clear the action variable."""

    env = dict(os.environ if base is None else base)
    value = action.env_value
    if value is None:
        env.pop(ACTION_ENV_VAR, None)
    else:
        env[ACTION_ENV_VAR] = value
    return env


def invoke_program(  # noqa: PLR0913
    resolved: ResolvedProgram,
    *,
    stdin_payload: bytes,
    action: Action,
    working_dir: str = "",
    attribute: str = "program",
    cancellation: Cancellation | None = None,
    settings: InvokerSettings | None = None,
) -> InvocationOutput:
    """Run the program once, feeding ``stdin_payload`` and capturing its output.

    Raises ``ExecutionError`` when the program cannot be launched, exits
    nonzero, or is cancelled. A zero exit status is the only success; stderr
    is not inspected in that case.
    """

    settings = settings or InvokerSettings()
    cancellation = cancellation or Cancellation()
    env = build_environment(action)

    logger.debug(
        "Executing external program: argv=%s working_dir=%s action=%s",
        resolved.argv,
        working_dir or ".",
        action.value,
    )

    try:
        # a deadline spent by an earlier step must not launch the next one
        expired = cancellation.reason()
        if expired is not None:
            raise _Cancelled(expired)

        try:
            process = subprocess.Popen(  # noqa: S603
                resolved.argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=working_dir or None,
                env=env,
            )
        except (OSError, ValueError) as error:
            # ValueError: argv, env or cwd holding an embedded NUL byte
            raise ExecutionError(
                f"Program failed to start: {error}",
                kind=FailureKind.LAUNCH_FAILED,
                attribute=attribute,
                program=resolved.executable,
                state=str(error),
            ) from error

        with _supervised(process, grace_seconds=settings.terminate_grace_seconds):
            stdout, stderr = _communicate(
                process,
                stdin_payload=stdin_payload,
                cancellation=cancellation,
                poll_interval=settings.poll_interval_seconds,
            )
    except _Cancelled as cancelled:
        raise ExecutionError(
            f"Program was terminated: {cancelled.reason}",
            kind=FailureKind.CANCELLED,
            attribute=attribute,
            program=resolved.executable,
            state=cancelled.reason,
        ) from None

    exit_code = process.returncode
    logger.debug(
        "Executed external program: argv=%s exit_code=%s output=%s",
        resolved.argv,
        exit_code,
        stdout.decode("utf-8", errors="replace"),
    )

    if exit_code != 0:
        state = describe_exit_state(exit_code)
        stderr_text = stderr.decode("utf-8", errors="replace")
        if stderr_text:
            raise ExecutionError(
                f"Program exited with {state}: {stderr_text}",
                kind=FailureKind.PROGRAM_FAILED,
                attribute=attribute,
                program=resolved.executable,
                stderr=stderr_text,
                state=state,
            )
        raise ExecutionError(
            f"Program exited with {state}",
            kind=FailureKind.PROGRAM_FAILED_NO_MESSAGE,
            attribute=attribute,
            program=resolved.executable,
            state=state,
        )

    return InvocationOutput(stdout=stdout, stderr=stderr, exit_code=exit_code)


def describe_exit_state(returncode: int) -> str:
    """Render a return code the way operators read it in process listings."""

    if returncode < 0:
        try:
            return f"signal: {signal.Signals(-returncode).name}"
        except ValueError:
            return f"signal: {-returncode}"
    return f"exit status {returncode}"


def _communicate(
    process: subprocess.Popen[bytes],
    *,
    stdin_payload: bytes,
    cancellation: Cancellation,
    poll_interval: float,
) -> tuple[bytes, bytes]:
    if cancellation.is_unbounded:
        return process.communicate(input=stdin_payload)

    pending_input: bytes | None = stdin_payload
    while True:
        try:
            return process.communicate(input=pending_input, timeout=poll_interval)
        except subprocess.TimeoutExpired:
            # stdin writing continues on retry; input may only be passed once
            pending_input = None
        reason = cancellation.reason()
        if reason is not None:
            raise _Cancelled(reason)


@contextmanager
def _supervised(process: subprocess.Popen[bytes], *, grace_seconds: float) -> Iterator[None]:
    """Close the pipes on exit and never leave the child running.

    A child still alive when the block exits (cancelled, or interrupted by an
    unexpected error) gets SIGTERM, then SIGKILL once ``grace_seconds`` pass.
    """

    with process:
        try:
            yield
        finally:
            for stop in (process.terminate, process.kill):
                if process.poll() is not None:
                    break
                with suppress(OSError):
                    stop()
                with suppress(subprocess.TimeoutExpired):
                    process.wait(timeout=grace_seconds)
