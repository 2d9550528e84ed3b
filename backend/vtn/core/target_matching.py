"""Target Matching: multiset-subset containment of a filter TargetSet in a record TargetSet.

Invariants:
    - matches(r, None) and matches(r, ()) are True for every r (unrestricted filter)
    - Every filter element needs its own structurally-equal record element:
      a filter listing an element twice needs two equal elements in the record
    - Order across ValuesMaps is irrelevant; order inside ValuesMap.values is significant
    - No partial or fuzzy matching; equality is ValuesMap.__eq__ (type + full values tuple)

Design Decisions:
    - Counter over the hashable ValuesMap: O(n + m) and multiplicity-aware in one pass
"""

from collections import Counter

from vtn.core.values_map import TargetSet, ValuesMap


def matches(record_targets: TargetSet | None, filter_targets: TargetSet | None) -> bool:
    """True iff filter_targets is a sub-multiset of record_targets."""
    if not filter_targets:
        return True
    available = Counter(record_targets or ())
    required = Counter(filter_targets)
    return all(available[vm] >= count for vm, count in required.items())


def single_value_filter(label: str, values: list[str]) -> TargetSet:
    """Query-parameter shape: one single-valued ValuesMap per value, same label."""
    return tuple(ValuesMap.of(label, value) for value in values)
