from __future__ import annotations

import allure
import pytest

from tf_external.errors import ConfigurationError
from tf_external.models import FailureKind
from tf_external.schema import DATA_SOURCE_ATTRIBUTES, RESOURCE_ATTRIBUTES, build_variants

pytestmark = [
    allure.epic("Lifecycle"),
    allure.feature("Declared Attributes"),
]


def test_declared_attribute_names() -> None:
    assert [item.name for item in DATA_SOURCE_ATTRIBUTES] == [
        "program",
        "working_dir",
        "query",
        "result",
    ]
    assert {item.name for item in RESOURCE_ATTRIBUTES} - {
        item.name for item in DATA_SOURCE_ATTRIBUTES
    } == {"program_destroy", "working_dir_destroy", "query_destroy"}


def test_data_source_defaults() -> None:
    variants = build_variants({"program": ["prog", "arg"]}, resource=False)

    assert variants.normal.program == ("prog", "arg")
    assert variants.normal.working_dir == ""
    assert dict(variants.normal.query) == {}
    assert variants.destroy is None


def test_resource_destroy_variant_carries_destroy_attribute_names() -> None:
    variants = build_variants(
        {
            "program": ["create.sh"],
            "query": {"a": "1"},
            "program_destroy": ["destroy.sh"],
            "working_dir_destroy": "/tmp",
            "query_destroy": {"b": "2"},
        },
        resource=True,
    )

    destroy = variants.configured_destroy
    assert destroy is not None
    assert destroy.program == ("destroy.sh",)
    assert destroy.working_dir == "/tmp"
    assert dict(destroy.query) == {"b": "2"}
    assert destroy.program_attribute == "program_destroy"
    assert destroy.query_attribute == "query_destroy"
    assert dict(variants.normal.query) == {"a": "1"}


def test_empty_destroy_program_leaves_variant_unconfigured() -> None:
    variants = build_variants({"program": ["p"], "program_destroy": []}, resource=True)

    assert variants.configured_destroy is None


def test_null_program_entries_become_blank_entries() -> None:
    variants = build_variants({"program": [None, "prog"]}, resource=False)

    assert variants.normal.program == ("", "prog")


def test_missing_program_attribute() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        build_variants({"query": {}}, resource=False)

    assert excinfo.value.kind == FailureKind.MISSING_PROGRAM
    assert excinfo.value.attribute == "program"


@pytest.mark.parametrize(
    ("attributes", "attribute"),
    [
        ({"program": "prog"}, "program"),
        ({"program": ["prog", 3]}, "program"),
        ({"program": ["prog"], "working_dir": 1}, "working_dir"),
        ({"program": ["prog"], "query": ["a"]}, "query"),
        ({"program": ["prog"], "query": {"a": 1}}, "query"),
        ({"program": ["prog"], "program_destroy": ["x"]}, "program_destroy"),
        ({"program": ["prog"], "result": {}}, "result"),
    ],
)
def test_invalid_data_source_attributes(attributes: dict, attribute: str) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        build_variants(attributes, resource=False)

    assert excinfo.value.kind == FailureKind.INVALID_ATTRIBUTE
    assert excinfo.value.attribute == attribute


def test_invalid_destroy_query_is_attributed_to_destroy_attribute() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        build_variants(
            {"program": ["p"], "program_destroy": ["d"], "query_destroy": {"a": True}},
            resource=True,
        )

    assert excinfo.value.attribute == "query_destroy"
