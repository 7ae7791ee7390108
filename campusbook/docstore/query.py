"""Field filters and ordering for in-memory query evaluation.

Comparison rules mirror a document database rather than Python: a missing
field never equals anything and never satisfies a range operator; values
of different types never compare, so ``1`` is not ``True`` and ``None``
is not less than ``0``.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Any, Callable

from campusbook.common.exceptions import InvalidQueryError

ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"

_DIRECTIONS = {
    "ascending": ASCENDING,
    "asc": ASCENDING,
    "descending": DESCENDING,
    "desc": DESCENDING,
}


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

_RANGE_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}

OPERATORS = frozenset({"==", "!=", "array-contains", *_RANGE_OPERATORS})


def get_field(document: dict[str, Any], field_path: str) -> Any:
    """Resolve a dotted field path, returning MISSING when any segment is absent."""
    value: Any = document
    for part in field_path.split("."):
        if not isinstance(value, dict) or part not in value:
            return MISSING
        value = value[part]
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def values_equal(left: Any, right: Any) -> bool:
    """Strict equality: bools and numbers are distinct types, at any depth."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, list) or isinstance(right, list):
        return (
            isinstance(left, list)
            and isinstance(right, list)
            and len(left) == len(right)
            and all(values_equal(a, b) for a, b in zip(left, right))
        )
    if isinstance(left, dict) or isinstance(right, dict):
        return (
            isinstance(left, dict)
            and isinstance(right, dict)
            and left.keys() == right.keys()
            and all(values_equal(left[key], right[key]) for key in left)
        )
    return left == right


def _type_rank(value: Any) -> tuple[Any, ...]:
    """Total ordering key: null < bool < number < string < array < map.

    Arrays and maps compare element by element, so mixed element types
    never reach Python's own ``<``.
    """
    if value is None:
        return (0,)
    if isinstance(value, bool):
        return (1, value)
    if _is_number(value):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    if isinstance(value, list):
        return (4, tuple(_type_rank(item) for item in value))
    if isinstance(value, dict):
        items = sorted((str(key), _type_rank(item)) for key, item in value.items())
        return (5, tuple(items))
    return (6, repr(value))


def _comparable(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return True
    if isinstance(left, bool) or isinstance(right, bool):
        return False
    return type(left) is type(right) and isinstance(left, (str, list, dict))


@dataclass(frozen=True)
class FieldFilter:
    """A single ``field op value`` condition."""

    field_path: str
    op_string: str
    value: Any

    def __post_init__(self) -> None:
        if not self.field_path or not isinstance(self.field_path, str):
            raise InvalidQueryError("Filter field path must be a non-empty string")
        if self.op_string not in OPERATORS:
            raise InvalidQueryError(
                f"Unsupported operator {self.op_string!r}. Supported: {', '.join(sorted(OPERATORS))}"
            )

    def matches(self, document: dict[str, Any]) -> bool:
        field_value = get_field(document, self.field_path)

        if self.op_string == "!=":
            return field_value is MISSING or not values_equal(field_value, self.value)
        if field_value is MISSING:
            return False
        if self.op_string == "==":
            return values_equal(field_value, self.value)
        if self.op_string == "array-contains":
            return isinstance(field_value, list) and any(
                values_equal(item, self.value) for item in field_value
            )

        if not _comparable(field_value, self.value):
            return False
        return _RANGE_OPERATORS[self.op_string](_type_rank(field_value), _type_rank(self.value))


@dataclass(frozen=True)
class FieldOrder:
    field_path: str
    direction: str = ASCENDING

    def __post_init__(self) -> None:
        if not self.field_path:
            raise InvalidQueryError("Order field path must be a non-empty string")
        normalized = _DIRECTIONS.get(str(self.direction).lower())
        if normalized is None:
            raise InvalidQueryError(f"Unsupported order direction {self.direction!r}")
        object.__setattr__(self, "direction", normalized)


def apply_ordering(
    rows: list[tuple[str, dict[str, Any]]],
    orders: tuple[FieldOrder, ...],
) -> list[tuple[str, dict[str, Any]]]:
    """Sort ``(id, document)`` rows by each order in turn; missing fields sort last."""
    result = list(rows)
    # Stable sorts applied from the least significant key.
    for order in reversed(orders):
        present = [row for row in result if get_field(row[1], order.field_path) is not MISSING]
        missing = [row for row in result if get_field(row[1], order.field_path) is MISSING]
        present.sort(
            key=lambda row: _type_rank(get_field(row[1], order.field_path)),
            reverse=order.direction == DESCENDING,
        )
        result = present + missing
    return result
