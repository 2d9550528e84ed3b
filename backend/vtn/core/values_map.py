"""ValuesMap & TargetSet: typed attribute lists used as payloads, attributes and targets.

Invariants:
    - A value is exactly one of IntegerValue, NumberValue, StringValue, BooleanValue, PointValue
    - Values of different variants never compare equal (1 != 1.0 != "1" != True)
    - Numbers and point coordinates are finite: NaN and +/-Infinity have no JSON form
    - ValuesMap.type is 1..128 characters; ValuesMap.values keeps caller order
    - to_json(from_json(x)) == x for every accepted JSON document

Design Decisions:
    - Frozen dataclasses per variant: hashable (multiset counting) and class-aware equality
    - JSON bool checked before int: bool is an int subclass in Python
"""

import math
from dataclasses import dataclass
from typing import Union

from vtn.core.domain_types import check_name
from vtn.core.errors import ValidationError


@dataclass(frozen=True)
class Point:
    """A value on an x/y plane, e.g. longitude/latitude."""
    x: float | None = None
    y: float | None = None


@dataclass(frozen=True)
class IntegerValue:
    value: int


@dataclass(frozen=True)
class NumberValue:
    value: float


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class BooleanValue:
    value: bool


@dataclass(frozen=True)
class PointValue:
    value: Point


Value = Union[IntegerValue, NumberValue, StringValue, BooleanValue, PointValue]


@dataclass(frozen=True)
class ValuesMap:
    """One or more values associated with a type label, e.g. GROUP -> ["group-1"]."""
    type: str
    values: tuple[Value, ...] = ()

    @classmethod
    def of(cls, type_: str, *raw_values: object) -> "ValuesMap":
        """Build from plain Python values, e.g. ValuesMap.of("GROUP", "g1")."""
        return cls(
            type=check_name(type_, "type"),
            values=tuple(
                value_from_json(v, f"values[{i}]") for i, v in enumerate(raw_values)
            ),
        )


# Ordered sequence of ValuesMap. None/() means "unrestricted" when used as a filter.
TargetSet = tuple[ValuesMap, ...]


# ─── JSON codec ──────────────────────────────────────────────────

def _finite(value: float, field: str) -> float:
    if not math.isfinite(value):
        raise ValidationError(f"{field} must be a finite number", field)
    return value


def _point_coordinate(raw: object, field: str) -> float | None:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValidationError(f"{field} must be a number or null", field)
    return _finite(float(raw), field)


def value_from_json(raw: object, field: str = "value") -> Value:
    """Decode one JSON-native value into its tagged variant."""
    if isinstance(raw, bool):
        return BooleanValue(raw)
    if isinstance(raw, int):
        return IntegerValue(raw)
    if isinstance(raw, float):
        return NumberValue(_finite(raw, field))
    if isinstance(raw, str):
        return StringValue(raw)
    if isinstance(raw, Point):
        return PointValue(Point(
            x=_point_coordinate(raw.x, f"{field}.x"),
            y=_point_coordinate(raw.y, f"{field}.y"),
        ))
    if isinstance(raw, dict) and set(raw) <= {"x", "y"}:
        return PointValue(Point(
            x=_point_coordinate(raw.get("x"), f"{field}.x"),
            y=_point_coordinate(raw.get("y"), f"{field}.y"),
        ))
    raise ValidationError(
        f"{field} must be an integer, number, string, boolean or point", field,
    )


def value_to_json(value: Value) -> object:
    if isinstance(value, PointValue):
        return {"x": value.value.x, "y": value.value.y}
    return value.value


def values_map_from_json(raw: object, field: str = "valuesMap") -> ValuesMap:
    if not isinstance(raw, dict):
        raise ValidationError(f"{field} must be an object", field)
    if "type" not in raw:
        raise ValidationError(f"{field}.type is required", f"{field}.type")
    values = raw.get("values")
    if not isinstance(values, list):
        raise ValidationError(f"{field}.values must be a list", f"{field}.values")
    return ValuesMap(
        type=check_name(raw["type"], f"{field}.type"),
        values=tuple(
            value_from_json(v, f"{field}.values[{i}]") for i, v in enumerate(values)
        ),
    )


def values_map_to_json(values_map: ValuesMap) -> dict:
    return {
        "type": values_map.type,
        "values": [value_to_json(v) for v in values_map.values],
    }


def target_set_from_json(raw: object, field: str = "targets") -> TargetSet | None:
    """Decode a list of ValuesMap. JSON null stays None (absent != empty)."""
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ValidationError(f"{field} must be a list", field)
    return tuple(
        values_map_from_json(item, f"{field}[{i}]") for i, item in enumerate(raw)
    )


def target_set_to_json(targets: TargetSet | None) -> list[dict] | None:
    if targets is None:
        return None
    return [values_map_to_json(vm) for vm in targets]
