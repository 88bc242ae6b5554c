"""Map data source and resource operations onto program invocations.

| Operation          | Invocations                                        |
|--------------------|----------------------------------------------------|
| data source read   | normal variant, action ``none``                    |
| resource create    | normal variant, action ``create``                  |
| resource read      | none; the prior state is returned unchanged        |
| resource update    | destroy variant (``delete``), then normal (``update``) |
| resource delete    | destroy variant (``delete``)                       |

A missing destroy variant skips that step. A failed step aborts the
operation; nothing is retried. Instances hold no per-call state, so one
instance may serve many entities from several threads.
"""

from __future__ import annotations

import logging

from tf_external.codec import decode_result, encode_query
from tf_external.config import InvokerSettings
from tf_external.diagnostics import report
from tf_external.errors import ExternalProgramError
from tf_external.invoker import Cancellation, invoke_program
from tf_external.models import (
    Action,
    EntityState,
    InvocationOutcome,
    InvocationRequest,
    ProgramVariants,
)
from tf_external.resolver import resolve_program

logger = logging.getLogger(__name__)


class ProgramRunner:
    """Resolve, encode, invoke and decode for one invocation request."""

    def __init__(
        self,
        *,
        settings: InvokerSettings | None = None,
        search_path: str | None = None,
    ) -> None:
        self.settings = settings or InvokerSettings()
        self.search_path = search_path

    def run(
        self,
        request: InvocationRequest,
        *,
        cancellation: Cancellation | None = None,
    ) -> dict[str, str]:
        spec = request.spec
        resolved = resolve_program(
            spec.program,
            attribute=spec.program_attribute,
            search_path=self.search_path,
        )
        payload = encode_query(spec.query, attribute=spec.query_attribute)
        output = invoke_program(
            resolved,
            stdin_payload=payload,
            action=request.action,
            working_dir=spec.working_dir,
            attribute=spec.program_attribute,
            cancellation=cancellation,
            settings=self.settings,
        )
        return decode_result(
            output.stdout,
            attribute=spec.program_attribute,
            program=resolved.executable,
        )


class _Operations:
    def __init__(self, runner: ProgramRunner | None = None) -> None:
        self.runner = runner or ProgramRunner()

    def _execute(
        self,
        request: InvocationRequest,
        cancellation: Cancellation | None,
    ) -> InvocationOutcome:
        try:
            result = self.runner.run(request, cancellation=cancellation)
        except ExternalProgramError as error:
            diagnostic = report(error)
            logger.warning(
                "External program failed: action=%s attribute=%s summary=%s",
                request.action.value,
                diagnostic.attribute_path,
                diagnostic.summary,
            )
            return InvocationOutcome.failure(diagnostic)
        return InvocationOutcome.success(EntityState(result=result))


class ExternalDataSource(_Operations):
    """Data source whose state is computed by the normal program variant."""

    def read(
        self,
        variants: ProgramVariants,
        *,
        cancellation: Cancellation | None = None,
    ) -> InvocationOutcome:
        logger.info("Reading external data source")
        return self._execute(InvocationRequest(variants.normal, Action.NONE), cancellation)


class ExternalResource(_Operations):
    """Resource with create/update/delete delegated to external programs."""

    def create(
        self,
        variants: ProgramVariants,
        *,
        cancellation: Cancellation | None = None,
    ) -> InvocationOutcome:
        logger.info("Creating external resource")
        return self._execute(InvocationRequest(variants.normal, Action.CREATE), cancellation)

    def read(self, prior_state: EntityState | None) -> InvocationOutcome:
        """Return the state recorded by the last create or update."""

        return InvocationOutcome.success(prior_state)

    def update(
        self,
        variants: ProgramVariants,
        *,
        cancellation: Cancellation | None = None,
    ) -> InvocationOutcome:
        logger.info("Updating external resource")
        destroy = variants.configured_destroy
        if destroy is not None:
            teardown = self._execute(InvocationRequest(destroy, Action.DELETE), cancellation)
            if teardown.has_error:
                return teardown
        return self._execute(InvocationRequest(variants.normal, Action.UPDATE), cancellation)

    def delete(
        self,
        variants: ProgramVariants,
        *,
        cancellation: Cancellation | None = None,
    ) -> InvocationOutcome:
        logger.info("Deleting external resource")
        destroy = variants.configured_destroy
        if destroy is None:
            return InvocationOutcome.success(None)
        outcome = self._execute(InvocationRequest(destroy, Action.DELETE), cancellation)
        if outcome.has_error:
            return outcome
        return InvocationOutcome.success(None)
