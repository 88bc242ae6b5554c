"""Domain models for external program invocation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

ACTION_ENV_VAR = "TF_EXTERNAL_ACTION"
STATE_ID = "-"


class Action(str, Enum):
    """Lifecycle phase that triggered an invocation."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    NONE = "none"

    @property
    def env_value(self) -> str | None:
        """Value exported as ``TF_EXTERNAL_ACTION``, or None to leave it unset."""

        if self in (Action.CREATE, Action.UPDATE, Action.DELETE):
            return self.value
        return None


class FailureKind(str, Enum):
    """Stable failure taxonomy shared by errors and diagnostics."""

    MISSING_PROGRAM = "missing_program"
    INVALID_ATTRIBUTE = "invalid_attribute"
    QUERY_ENCODING = "query_encoding"
    LOOKUP_FAILED = "lookup_failed"
    PROGRAM_FAILED = "program_failed"
    PROGRAM_FAILED_NO_MESSAGE = "program_failed_no_message"
    LAUNCH_FAILED = "launch_failed"
    CANCELLED = "cancelled"
    MALFORMED_OUTPUT = "malformed_output"
    INVALID_SHAPE = "invalid_shape"


class Severity(str, Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class InvocationSpec:
    """Program, working directory and query configured for one variant."""

    program: tuple[str, ...]
    working_dir: str = ""
    query: Mapping[str, str] = field(default_factory=dict)
    program_attribute: str = "program"
    working_dir_attribute: str = "working_dir"
    query_attribute: str = "query"

    def __post_init__(self) -> None:
        object.__setattr__(self, "program", tuple(self.program))
        object.__setattr__(self, "query", MappingProxyType(dict(self.query)))

    @property
    def is_configured(self) -> bool:
        """False when the program list is empty, before dropping blank entries."""

        return len(self.program) > 0

    @classmethod
    def destroy(
        cls,
        program: tuple[str, ...] | list[str],
        working_dir: str = "",
        query: Mapping[str, str] | None = None,
    ) -> InvocationSpec:
        """Build a spec attributed to the ``*_destroy`` attributes."""

        return cls(
            program=tuple(program),
            working_dir=working_dir,
            query=query or {},
            program_attribute="program_destroy",
            working_dir_attribute="working_dir_destroy",
            query_attribute="query_destroy",
        )


@dataclass(frozen=True, slots=True)
class ProgramVariants:
    """Normal variant plus the optional destroy variant of a managed entity."""

    normal: InvocationSpec
    destroy: InvocationSpec | None = None

    @property
    def configured_destroy(self) -> InvocationSpec | None:
        """Destroy variant if it carries a program list, else None."""

        if self.destroy is None or not self.destroy.is_configured:
            return None
        return self.destroy


@dataclass(frozen=True, slots=True)
class InvocationRequest:
    """One program invocation: which variant, under which lifecycle action."""

    spec: InvocationSpec
    action: Action


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Attribute-scoped, user-facing failure report."""

    severity: Severity
    summary: str
    detail: str
    attribute_path: str
    kind: FailureKind

    def to_dict(self) -> dict[str, str]:
        """Serialize for CLI output and logs."""

        return {
            "severity": self.severity.value,
            "summary": self.summary,
            "detail": self.detail,
            "attribute": self.attribute_path,
            "kind": self.kind.value,
        }


@dataclass(frozen=True, slots=True)
class EntityState:
    """Published state of a data source or resource."""

    result: Mapping[str, str]
    id: str = STATE_ID

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "result": dict(self.result)}


@dataclass(frozen=True, slots=True)
class InvocationOutcome:
    """Either a published state or a non-empty list of diagnostics."""

    state: EntityState | None = None
    diagnostics: tuple[Diagnostic, ...] = ()

    def __post_init__(self) -> None:
        if self.state is not None and self.diagnostics:
            raise ValueError("Outcome cannot carry both a state and diagnostics.")

    @property
    def has_error(self) -> bool:
        return any(item.severity is Severity.ERROR for item in self.diagnostics)

    @property
    def result(self) -> dict[str, str] | None:
        if self.state is None:
            return None
        return dict(self.state.result)

    @classmethod
    def success(cls, state: EntityState | None) -> InvocationOutcome:
        return cls(state=state)

    @classmethod
    def failure(cls, diagnostic: Diagnostic) -> InvocationOutcome:
        return cls(diagnostics=(diagnostic,))
