"""
Query filter: named comparison predicates plus an optional page window.

A ``Filter`` is built by the caller before a batch query or count::

    flt = Filter().equal("status", "active").above("age", 18).page(20, 2)
    users = orm.batch_query(User, flt)

Every registration checks its operand immediately and raises
``TypeMismatchError`` before anything is stored. Rendering happens in the
statement builder, which checks the operand against the target field's
kind and applies the operator template::

    EQUAL      `field` = v
    NOT_EQUAL  `field` != v
    BELOW      `field` < v
    ABOVE      `field` > v
    IN         `field` in (v1,v2,...)      empty set renders nothing
    NOT_IN     `field` not in (v1,v2,...)  empty set renders nothing
    LIKE       `field` LIKE '%v%'           % and _ in v match literally

Pagination is kept apart from predicate text as a ``PageWindow``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ormspine.errors import TypeMismatchError
from ormspine.marshal import Resolver, encode_value
from ormspine.model import Item, derive_info
from ormspine.types import TypeKind, classify_value

DEFAULT_PAGE_SIZE = 10


class Operator(str, Enum):
    EQUAL = "="
    NOT_EQUAL = "!="
    BELOW = "<"
    ABOVE = ">"
    IN = "in"
    NOT_IN = "not in"
    LIKE = "like"


_TEMPLATES: dict[Operator, str] = {
    Operator.EQUAL: "`{name}` = {value}",
    Operator.NOT_EQUAL: "`{name}` != {value}",
    Operator.BELOW: "`{name}` < {value}",
    Operator.ABOVE: "`{name}` > {value}",
    Operator.IN: "`{name}` in ({value})",
    Operator.NOT_IN: "`{name}` not in ({value})",
    Operator.LIKE: "`{name}` LIKE '%{value}%'",
}


@dataclass(frozen=True)
class PageWindow:
    """Normalized page window: ``size >= 1``, ``number >= 1``."""

    size: int
    number: int

    @classmethod
    def normalize(cls, size: int, number: int) -> PageWindow:
        if size < 1:
            size = DEFAULT_PAGE_SIZE
        if number < 1:
            number = 1
        return cls(size, number)

    @property
    def limit(self) -> int:
        return self.size

    @property
    def offset(self) -> int:
        return max(self.size * (self.number - 1), 0)


@dataclass(frozen=True)
class SortKey:
    key: str
    ascending: bool = True


@dataclass(frozen=True)
class FilterItem:
    """One comparison: operator plus operand."""

    operator: Operator
    value: Any

    def operand_kinds(self) -> list[TypeKind]:
        """Kinds of the operand, one list level unwrapped (empty for an empty set)."""
        values = self.value if isinstance(self.value, list) else [self.value]
        return [classify_value(v) for v in values]

    def verify(self, item: Item) -> None:
        """Check every operand element against the field's kind.

        Raises:
            TypeMismatchError: the operand cannot be compared with the field
        """
        operands = self.operand_kinds()
        if not operands:
            return
        target = item.elem_kind if item.type_kind is TypeKind.SLICE else item.type_kind
        compatible = all(_comparable(operand, target) for operand in operands)
        if compatible and target is TypeKind.STRUCT:
            records = self.value if isinstance(self.value, list) else [self.value]
            compatible = all(isinstance(r, item.depend_info.record_type) for r in records)
        if not compatible:
            raise TypeMismatchError(
                f"{self.operator.name} operand {self.value!r} does not match "
                f"{target.value} field {item.name!r}",
                value=self.value,
                expected=target,
            ).with_context(field=item.name)

    def render(self, column: str, item: Item, resolve: Resolver = derive_info) -> str:
        """Predicate text for ``column``; empty for an empty in-set."""
        self.verify(item)
        if self.operator in (Operator.IN, Operator.NOT_IN) and not self.value:
            return ""
        text = encode_value(self.value, resolve)
        if self.operator is Operator.LIKE:
            return _like(column, text[1:-1])
        return _TEMPLATES[self.operator].format(name=column, value=text)


class Filter:
    """Accumulator of predicates keyed by field name.

    Registering the same key twice replaces the earlier predicate. Keys
    may be attribute names or storage names.
    """

    def __init__(self) -> None:
        self._params: dict[str, FilterItem] = {}
        self._page: PageWindow | None = None
        self._sort: list[SortKey] = []

    # ── Predicates ───────────────────────────────────────────────

    def equal(self, key: str, value: Any) -> Filter:
        return self._add(key, Operator.EQUAL, _single(value, "equal"))

    def not_equal(self, key: str, value: Any) -> Filter:
        return self._add(key, Operator.NOT_EQUAL, _single(value, "not_equal"))

    def below(self, key: str, value: Any) -> Filter:
        return self._add(key, Operator.BELOW, _basic(value, "below"))

    def above(self, key: str, value: Any) -> Filter:
        return self._add(key, Operator.ABOVE, _basic(value, "above"))

    def in_(self, key: str, values: Any) -> Filter:
        return self._add(key, Operator.IN, _many(values, "in"))

    def not_in(self, key: str, values: Any) -> Filter:
        return self._add(key, Operator.NOT_IN, _many(values, "not_in"))

    def like(self, key: str, value: Any) -> Filter:
        if not isinstance(value, str):
            raise TypeMismatchError(
                f"like requires a string operand, got {value!r}", value=value, expected=TypeKind.STRING
            ).with_context(field=key)
        return self._add(key, Operator.LIKE, value)

    # ── Window / order ───────────────────────────────────────────

    def page(self, size: int, number: int) -> Filter:
        self._page = PageWindow.normalize(size, number)
        return self

    def sort(self, key: str, ascending: bool = True) -> Filter:
        self._sort.append(SortKey(key, ascending))
        return self

    # ── Accessors ────────────────────────────────────────────────

    def items(self) -> dict[str, FilterItem]:
        return dict(self._params)

    def item_for(self, item: Item) -> FilterItem | None:
        """Predicate registered for ``item`` by attribute or storage name."""
        found = self._params.get(item.name)
        if found is None:
            found = self._params.get(item.storage_name)
        return found

    @property
    def pagination(self) -> PageWindow | None:
        return self._page

    @property
    def sort_keys(self) -> list[SortKey]:
        return list(self._sort)

    def _add(self, key: str, operator: Operator, value: Any) -> Filter:
        self._params[key] = FilterItem(operator, value)
        return self

    def __repr__(self) -> str:
        return f"Filter(params={self._params!r}, page={self._page!r})"


def _single(value: Any, op: str) -> Any:
    kind = _classify(value, op)
    if kind is TypeKind.SLICE:
        raise TypeMismatchError(f"{op} does not accept a list operand", value=value)
    return value


def _basic(value: Any, op: str) -> Any:
    kind = _classify(value, op)
    if not kind.is_basic:
        raise TypeMismatchError(f"{op} requires a basic scalar operand, got {value!r}", value=value)
    return value


def _many(values: Any, op: str) -> list[Any]:
    if not isinstance(values, (list, tuple)):
        raise TypeMismatchError(f"{op} requires a list operand, got {values!r}", value=values)
    kinds = [_classify(v, op) for v in values]
    if TypeKind.SLICE in kinds:
        raise TypeMismatchError(f"{op} does not accept nested lists", value=values)
    if any(not _comparable(kind, kinds[0]) for kind in kinds[1:]):
        raise TypeMismatchError(f"{op} requires operands of one kind, got {values!r}", value=values)
    return list(values)


def _classify(value: Any, op: str) -> TypeKind:
    if value is None:
        raise TypeMismatchError(f"{op} does not accept None", value=value)
    return classify_value(value)


def _comparable(operand: TypeKind, target: TypeKind) -> bool:
    return operand.family == target.family or (operand.is_numeric and target.is_numeric)


_LIKE_SPECIAL = ("\\", "%", "_")


def _like(column: str, text: str) -> str:
    """Contains-match; ``%``, ``_`` and ``\\`` in the operand match literally."""
    if not any(c in text for c in _LIKE_SPECIAL):
        return _TEMPLATES[Operator.LIKE].format(name=column, value=text)
    for c in _LIKE_SPECIAL:
        text = text.replace(c, "\\" + c)
    return _TEMPLATES[Operator.LIKE].format(name=column, value=text) + " ESCAPE '\\'"


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "Filter",
    "FilterItem",
    "Operator",
    "PageWindow",
    "SortKey",
]
