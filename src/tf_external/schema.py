"""Declared attributes and conversion of raw attribute values to program variants."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from tf_external.errors import ConfigurationError
from tf_external.models import FailureKind, InvocationSpec, ProgramVariants

_PROGRAM_DESCRIPTION = (
    "A list of strings, whose first element is the program to run and whose subsequent "
    "elements are optional command line arguments to the program. The program is not "
    "executed through a shell, so it is not necessary to escape shell metacharacters nor "
    "add quotes around arguments containing spaces."
)
_WORKING_DIR_DESCRIPTION = (
    "Working directory of the program. If not supplied, the program will run in the "
    "current directory."
)
_QUERY_DESCRIPTION = (
    "A map of string values to pass to the external program as the query arguments. "
    "If not supplied, the program will receive an empty object as its input."
)


@dataclass(frozen=True, slots=True)
class AttributeSchema:
    """One declared attribute."""

    name: str
    type: str
    description: str
    required: bool = False
    computed: bool = False


DATA_SOURCE_ATTRIBUTES: tuple[AttributeSchema, ...] = (
    AttributeSchema("program", "list(string)", _PROGRAM_DESCRIPTION, required=True),
    AttributeSchema("working_dir", "string", _WORKING_DIR_DESCRIPTION),
    AttributeSchema("query", "map(string)", _QUERY_DESCRIPTION),
    AttributeSchema(
        "result",
        "map(string)",
        "A map of string values returned from the external program.",
        computed=True,
    ),
)

RESOURCE_ATTRIBUTES: tuple[AttributeSchema, ...] = (
    *DATA_SOURCE_ATTRIBUTES,
    AttributeSchema(
        "program_destroy",
        "list(string)",
        "Same as *program*, but run on update (before *program*) and on destroy.",
    ),
    AttributeSchema("working_dir_destroy", "string", _WORKING_DIR_DESCRIPTION),
    AttributeSchema("query_destroy", "map(string)", _QUERY_DESCRIPTION),
)


def build_variants(attributes: Mapping[str, Any], *, resource: bool) -> ProgramVariants:
    """Validate raw attribute values and build the program variants.

    ``program`` is required for both entity kinds. The ``*_destroy``
    attributes are accepted only for resources; when ``program_destroy`` is
    absent or an empty list the destroy variant is left unconfigured.
    """

    declared = RESOURCE_ATTRIBUTES if resource else DATA_SOURCE_ATTRIBUTES
    by_name = {attribute.name: attribute for attribute in declared}
    for name in attributes:
        if name not in by_name:
            raise _invalid(name, f"Unsupported attribute {name!r}.")
        if by_name[name].computed:
            raise _invalid(name, f"Attribute {name!r} is computed and cannot be configured.")

    if "program" not in attributes:
        raise ConfigurationError(
            "The required 'program' attribute is not set.",
            attribute="program",
        )

    normal = InvocationSpec(
        program=_program(attributes, "program"),
        working_dir=_string(attributes, "working_dir"),
        query=_query(attributes, "query"),
    )
    if not resource or attributes.get("program_destroy") is None:
        return ProgramVariants(normal=normal)

    destroy = InvocationSpec.destroy(
        program=_program(attributes, "program_destroy"),
        working_dir=_string(attributes, "working_dir_destroy"),
        query=_query(attributes, "query_destroy"),
    )
    return ProgramVariants(normal=normal, destroy=destroy)


def _program(attributes: Mapping[str, Any], name: str) -> tuple[str, ...]:
    value = attributes.get(name)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise _invalid(name, f"{name} must be a list of strings.")
    items: list[str] = []
    for item in value:
        if item is None:
            items.append("")
            continue
        if not isinstance(item, str):
            raise _invalid(name, f"{name} entries must be strings, got {item!r}.")
        items.append(item)
    return tuple(items)


def _string(attributes: Mapping[str, Any], name: str) -> str:
    value = attributes.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _invalid(name, f"{name} must be a string.")
    return value


def _query(attributes: Mapping[str, Any], name: str) -> dict[str, str]:
    value = attributes.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _invalid(name, f"{name} must be a map of string values.")
    for key, item in value.items():
        if not isinstance(item, str):
            raise _invalid(name, f"{name} value for {key!r} must be a string.")
    return dict(value)


def _invalid(name: str, message: str) -> ConfigurationError:
    return ConfigurationError(message, attribute=name, kind=FailureKind.INVALID_ATTRIBUTE)
