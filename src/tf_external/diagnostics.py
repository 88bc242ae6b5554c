"""Translate invocation errors into attribute-scoped diagnostics."""

from __future__ import annotations

import sys

from tf_external.errors import (
    ConfigurationError,
    ExecutionError,
    ExternalProgramError,
    ProgramLookupError,
    ProtocolError,
    QueryEncodingError,
)
from tf_external.models import Diagnostic, FailureKind, Severity

SUMMARY_MISSING_PROGRAM = "External Program Missing"
SUMMARY_INVALID_ATTRIBUTE = "Invalid Attribute Value"
SUMMARY_QUERY_FAILED = "Query Handling Failed"
SUMMARY_LOOKUP_FAILED = "External Program Lookup Failed"
SUMMARY_EXECUTION_FAILED = "External Program Execution Failed"
SUMMARY_EXECUTION_CANCELLED = "External Program Execution Cancelled"
SUMMARY_UNEXPECTED_RESULTS = "Unexpected External Program Results"

_LOOKUP_HINT = """\
The program must be accessible according to the platform where the program is being run.

If the program should be found automatically, ensure it lives in a directory listed in \
the search path: '$PATH' on Unix-based platforms, '%PATH%' on Windows.

If the program is relative to the configuration, prefix its name with the configuration \
directory so it works regardless of where the configuration is used, for example \
"${path.module}/my-program".

The program must also be executable: on Unix-based platforms the file needs the \
executable bit set."""

_OUTPUT_CONTRACT_HINT = """\
This is a defect in the external program, not in the invocation: program output must be \
a JSON encoded object with string keys and string values only. Nested objects, arrays, \
numbers, booleans and null are rejected, not converted.

If the error is unclear, rerun with --log-level DEBUG to see the raw program output."""


def report(error: ExternalProgramError) -> Diagnostic:
    """Map one invocation error to exactly one diagnostic."""

    if isinstance(error, ConfigurationError):
        return _configuration(error)
    if isinstance(error, QueryEncodingError):
        return _diagnostic(
            error,
            SUMMARY_QUERY_FAILED,
            "An unexpected error occurred while serializing the query. "
            "Query values must be strings."
            f"\n\nError: {error}",
        )
    if isinstance(error, ProgramLookupError):
        return _diagnostic(
            error,
            SUMMARY_LOOKUP_FAILED,
            "An unexpected error occurred while attempting to find the program.\n\n"
            f"{_LOOKUP_HINT}\n"
            f"\nPlatform: {error.platform}"
            f"\nProgram: {error.program}"
            f"\nError: {error.error}",
        )
    if isinstance(error, ExecutionError):
        return _execution(error)
    if isinstance(error, ProtocolError):
        return _diagnostic(
            error,
            SUMMARY_UNEXPECTED_RESULTS,
            "Unexpected results were received after executing the program.\n\n"
            f"{_OUTPUT_CONTRACT_HINT}\n"
            f"\nProgram: {error.program}"
            f"\nResult Error: {error}",
        )
    raise TypeError(f"Unsupported error type: {type(error).__name__}")


def _configuration(error: ConfigurationError) -> Diagnostic:
    if error.kind is FailureKind.MISSING_PROGRAM:
        return _diagnostic(
            error,
            SUMMARY_MISSING_PROGRAM,
            "The configuration does not name a program to execute. "
            "Verify the program list contains at least one non-empty value.",
        )
    return _diagnostic(error, SUMMARY_INVALID_ATTRIBUTE, str(error))


def _execution(error: ExecutionError) -> Diagnostic:
    if error.kind is FailureKind.CANCELLED:
        return _diagnostic(
            error,
            SUMMARY_EXECUTION_CANCELLED,
            "The program was terminated before it finished and its output was discarded."
            f"\n\nProgram: {error.program}"
            f"\nReason: {error.state}",
        )
    if error.kind is FailureKind.PROGRAM_FAILED:
        detail = (
            "An unexpected error occurred while executing the program."
            f"\n\nProgram: {error.program}"
            f"\nError Message: {error.stderr}"
            f"\nState: {error.state}"
        )
    elif error.kind is FailureKind.PROGRAM_FAILED_NO_MESSAGE:
        detail = (
            "An unexpected error occurred while executing the program.\n\n"
            "The program was executed, however it returned no additional error messaging."
            f"\n\nProgram: {error.program}"
            f"\nState: {error.state}"
        )
    else:
        detail = (
            "An unexpected error occurred while executing the program."
            f"\n\nProgram: {error.program}"
            f"\nPlatform: {sys.platform}"
            f"\nError: {error.state}"
        )
    return _diagnostic(error, SUMMARY_EXECUTION_FAILED, detail)


def _diagnostic(error: ExternalProgramError, summary: str, detail: str) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        summary=summary,
        detail=detail,
        attribute_path=error.attribute,
        kind=error.kind,
    )
