"""Controllers for tf-external CLI commands."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tf_external.config import Settings
from tf_external.diagnostics import report
from tf_external.errors import ConfigurationError
from tf_external.invoker import Cancellation
from tf_external.lifecycle import ExternalDataSource, ExternalResource, ProgramRunner
from tf_external.models import Diagnostic, EntityState, InvocationOutcome
from tf_external.schema import build_variants

logger = logging.getLogger(__name__)

RESOURCE_OPERATIONS = ("create", "read", "update", "delete")


@dataclass(slots=True)
class OperationCommand:
    """CLI input for one data source or resource operation."""

    entity: str
    operation: str
    config_path: Path
    state_path: Path | None = None
    timeout_seconds: float | None = None


@dataclass(slots=True)
class OperationResult:
    """Rendered CLI output."""

    success: bool
    lines: list[str]


class ExternalCliController:
    """Load configuration, run the requested operation and render the outcome."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            return self.reload_settings()
        return self._settings

    def reload_settings(self) -> Settings:
        """Read and validate ``TF_EXTERNAL_*`` settings; ``ValueError`` when invalid."""

        settings = Settings.from_env()
        settings.validate()
        self._settings = settings
        return settings

    def run(self, command: OperationCommand) -> OperationResult:
        logger.info(
            "Running %s %s: config=%s",
            command.entity,
            command.operation,
            command.config_path,
        )
        runner = ProgramRunner(settings=self.settings.invoker)
        cancellation = Cancellation(timeout_seconds=self._timeout(command))

        try:
            if command.entity == "resource" and command.operation == "read":
                state = _load_state(command.state_path) if command.state_path else None
                return _render(ExternalResource(runner).read(state))
            attributes = _load_attributes(command.config_path)
        except (OSError, TypeError, ValueError) as error:
            return OperationResult(success=False, lines=[f"Invalid input file: {error}"])

        try:
            variants = build_variants(attributes, resource=command.entity == "resource")
        except ConfigurationError as error:
            return _render(InvocationOutcome.failure(report(error)))

        if command.entity == "data":
            outcome = ExternalDataSource(runner).read(variants, cancellation=cancellation)
        else:
            resource = ExternalResource(runner)
            operation = getattr(resource, command.operation)
            outcome = operation(variants, cancellation=cancellation)
        return _render(outcome)

    def _timeout(self, command: OperationCommand) -> float | None:
        timeout = command.timeout_seconds
        if timeout is None:
            timeout = self.settings.invoker.timeout_seconds
        return timeout or None


def _load_attributes(path: Path) -> dict[str, Any]:
    payload = json.loads(path.read_text("utf-8"))
    if not isinstance(payload, dict):
        raise TypeError(f"Expected JSON object in {path}")
    return payload


def _load_state(path: Path) -> EntityState:
    payload = _load_attributes(path)
    result = payload.get("result", {})
    if not isinstance(result, dict):
        raise TypeError(f"state.result must be an object in {path}")
    return EntityState(result=result, id=str(payload.get("id", "-")))


def _render(outcome: InvocationOutcome) -> OperationResult:
    if outcome.has_error:
        lines: list[str] = []
        for diagnostic in outcome.diagnostics:
            lines.extend(_render_diagnostic(diagnostic))
        return OperationResult(success=False, lines=lines)

    state = None if outcome.state is None else outcome.state.to_dict()
    return OperationResult(
        success=True,
        lines=[json.dumps(state, ensure_ascii=False, indent=2, sort_keys=True)],
    )


def _render_diagnostic(diagnostic: Diagnostic) -> list[str]:
    return [
        f"{diagnostic.severity.value.capitalize()}: {diagnostic.summary}",
        "",
        f"  with {diagnostic.attribute_path}",
        "",
        *(f"  {line}" if line else "" for line in diagnostic.detail.splitlines()),
        "",
    ]
