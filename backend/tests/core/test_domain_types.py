"""Domain Types: identifier and name checks, kind labels.

Tests:
    - check_identifier accepts the id alphabet, rejects "null" in any case
    - check_identifier rejects wrong types, bad characters and overlong ids
    - check_name enforces 1..128 characters
    - Every kind with a name label maps to the matching TargetLabel
"""

import pytest

from vtn.core.domain_types import (
    NAME_LABEL_BY_KIND, EntityKind, TargetLabel, check_identifier, check_name,
)
from vtn.core.errors import ValidationError


def test_check_identifier_accepts_uuid_and_slug():
    assert check_identifier("a1b2-c3_d4", "id") == "a1b2-c3_d4"
    assert check_identifier("0f8fad5b-d9cb-469f-a165-70867728950e", "id")


@pytest.mark.parametrize("value", ["null", "NULL", "Null"])
def test_check_identifier_rejects_null_word(value):
    with pytest.raises(ValidationError) as exc:
        check_identifier(value, "programID")
    assert exc.value.field == "programID"


@pytest.mark.parametrize("value", ["", "a b", "a/b", "x" * 129, 42, None])
def test_check_identifier_rejects_malformed(value):
    with pytest.raises(ValidationError):
        check_identifier(value, "id")


def test_check_name_bounds():
    assert check_name("x", "programName") == "x"
    assert check_name("x" * 128, "programName")
    with pytest.raises(ValidationError):
        check_name("", "programName")
    with pytest.raises(ValidationError):
        check_name("x" * 129, "programName")


def test_name_labels_follow_kind():
    assert NAME_LABEL_BY_KIND[EntityKind.PROGRAM] == TargetLabel.PROGRAM_NAME
    assert NAME_LABEL_BY_KIND[EntityKind.RESOURCE] == "RESOURCE_NAME"
    assert EntityKind.REPORT not in NAME_LABEL_BY_KIND


def test_kind_labels():
    assert EntityKind.VEN.label == "VEN"
    assert EntityKind.PROGRAM.label == "Program"
