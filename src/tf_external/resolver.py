"""Program list validation and executable lookup."""

from __future__ import annotations

import shutil
import sys
from collections.abc import Sequence
from dataclasses import dataclass

from tf_external.errors import ConfigurationError, ProgramLookupError


@dataclass(frozen=True, slots=True)
class ResolvedProgram:
    """Executable located on this platform plus its argument vector."""

    name: str
    executable: str
    args: tuple[str, ...]

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]


def clean_program(program: Sequence[object]) -> list[str]:
    """Drop empty and non-string entries, e.g. unset template placeholders."""

    return [arg for arg in program if isinstance(arg, str) and arg != ""]


def resolve_program(
    program: Sequence[object],
    *,
    attribute: str = "program",
    search_path: str | None = None,
) -> ResolvedProgram:
    """Validate a program list and locate its executable.

    The first element is looked up with ``shutil.which``, so bare names are
    searched on ``PATH`` (and ``PATHEXT`` on Windows) while names containing a
    path separator must point at an executable file.
    """

    cleaned = clean_program(program)
    if not cleaned:
        raise ConfigurationError(
            "The program list contains no non-empty values.",
            attribute=attribute,
        )

    name = cleaned[0]
    executable = shutil.which(name, path=search_path)
    if executable is None:
        raise ProgramLookupError(
            program=name,
            platform=sys.platform,
            error=_lookup_error_text(name),
            attribute=attribute,
        )
    return ResolvedProgram(name=name, executable=executable, args=tuple(cleaned[1:]))


def _lookup_error_text(name: str) -> str:
    if any(sep in name for sep in ("/", "\\")):
        return f"{name!r} does not exist or is not an executable file"
    return f"executable file {name!r} not found in $PATH"
