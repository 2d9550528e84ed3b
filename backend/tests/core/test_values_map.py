"""ValuesMap codec: typed values and their JSON shape.

Tests:
    - Integer, number, string and boolean values are distinct variants
    - NaN and +/-Infinity are rejected in numbers and point coordinates
    - Point objects decode from {x, y}
    - Malformed documents raise ValidationError
    - Absent targets stay None, empty targets stay ()
"""

import pytest

from vtn.core.errors import ValidationError
from vtn.core.values_map import (
    BooleanValue, IntegerValue, NumberValue, Point, PointValue, StringValue,
    ValuesMap, target_set_from_json, target_set_to_json, value_from_json,
    values_map_from_json,
)


def test_json_scalars_map_to_distinct_variants():
    assert value_from_json(1) == IntegerValue(1)
    assert value_from_json(1.0) == NumberValue(1.0)
    assert value_from_json("1") == StringValue("1")
    assert value_from_json(True) == BooleanValue(True)
    assert len({value_from_json(v) for v in (1, 1.0, "1", True)}) == 4


@pytest.mark.parametrize("number", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_numbers_rejected(number):
    with pytest.raises(ValidationError):
        value_from_json(number)
    with pytest.raises(ValidationError):
        value_from_json({"x": number, "y": 0.0})
    with pytest.raises(ValidationError):
        ValuesMap.of("PRICE", number)
    with pytest.raises(ValidationError):
        target_set_from_json([{"type": "GROUP", "values": [1.0, number]}])


def test_point_instance_coordinates_checked():
    with pytest.raises(ValidationError):
        value_from_json(Point(float("nan"), 1.0))


def test_point_decodes_from_object():
    assert value_from_json({"x": 1.5, "y": -2}) == PointValue(Point(1.5, -2.0))
    assert value_from_json({"x": 3.0}) == PointValue(Point(3.0, None))


def test_values_keep_order():
    assert ValuesMap.of("GROUP", "a", "b") != ValuesMap.of("GROUP", "b", "a")


@pytest.mark.parametrize("raw", [
    {"values": []},
    {"type": "GROUP"},
    {"type": "GROUP", "values": "g1"},
    {"type": "", "values": []},
    {"type": "GROUP", "values": [None]},
    {"type": "GROUP", "values": [{"z": 1}]},
    ["GROUP"],
])
def test_malformed_values_map_rejected(raw):
    with pytest.raises(ValidationError):
        values_map_from_json(raw)


def test_target_set_absent_versus_empty():
    assert target_set_from_json(None) is None
    assert target_set_from_json([]) == ()
    with pytest.raises(ValidationError):
        target_set_from_json({"type": "GROUP"})


def test_target_set_to_json_shape():
    doc = [
        {"type": "GROUP", "values": ["g1", 2, 2.5, False]},
        {"type": "LOCATION", "values": [{"x": 1.0, "y": 2.0}]},
    ]
    assert target_set_to_json(target_set_from_json(doc)) == doc
