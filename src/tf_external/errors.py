"""Error taxonomy raised by the resolver, codec and invoker.

Every error carries a ``FailureKind`` and the attribute it is attributed to.
Errors are raised inside components and converted to exactly one
``Diagnostic`` at the lifecycle boundary (see ``diagnostics.report``).
Nothing is retried.
"""

from __future__ import annotations

from tf_external.models import FailureKind


class ExternalProgramError(Exception):
    """Base error for external program invocation."""

    def __init__(self, message: str, *, kind: FailureKind, attribute: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.attribute = attribute


class ConfigurationError(ExternalProgramError):
    """Invalid or missing configuration; the user must fix it."""

    def __init__(
        self,
        message: str,
        *,
        attribute: str,
        kind: FailureKind = FailureKind.MISSING_PROGRAM,
    ) -> None:
        super().__init__(message, kind=kind, attribute=attribute)


class QueryEncodingError(ExternalProgramError):
    """Query could not be serialized to the wire format."""

    def __init__(self, message: str, *, attribute: str) -> None:
        super().__init__(message, kind=FailureKind.QUERY_ENCODING, attribute=attribute)


class ProgramLookupError(ExternalProgramError):
    """Executable could not be located on this platform."""

    def __init__(self, *, program: str, platform: str, error: str, attribute: str) -> None:
        super().__init__(
            f"Program {program!r} not found on {platform}: {error}",
            kind=FailureKind.LOOKUP_FAILED,
            attribute=attribute,
        )
        self.program = program
        self.platform = platform
        self.error = error


class ExecutionError(ExternalProgramError):
    """Program failed to launch, exited nonzero, or was cancelled."""

    def __init__(  # noqa: PLR0913
        self,
        message: str,
        *,
        kind: FailureKind,
        attribute: str,
        program: str,
        stderr: str = "",
        state: str = "",
    ) -> None:
        super().__init__(message, kind=kind, attribute=attribute)
        self.program = program
        self.stderr = stderr
        self.state = state


class ProtocolError(ExternalProgramError):
    """Program exited 0 but its output violates the wire contract."""

    def __init__(
        self,
        message: str,
        *,
        kind: FailureKind,
        attribute: str,
        program: str = "",
    ) -> None:
        super().__init__(message, kind=kind, attribute=attribute)
        self.program = program
