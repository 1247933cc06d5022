# roster_dashboard/core/filters.py
"""Conjunctive predicate filtering over fetched collections.

Criteria map a field name, or a tuple of field names where any one
matching is enough, to a rule::

    criteria = {
        ("Name", "Crew_ID"): Contains("ann"),
        "Base": Exact("DEL"),
        "Rank": ALL,
    }
    apply_filters(crew, criteria)

Every rule is a pure function of (value, rule). A field the item does not
have never matches, except under ``ALL``.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, TypeVar, Union

T = TypeVar("T")

_MISSING = object()


class _AllRule:
    """Sentinel rule: no constraint on the field."""

    def matches(self, value: Any) -> bool:
        return True

    def __repr__(self) -> str:
        return "ALL"


ALL = _AllRule()


@dataclass(frozen=True)
class Exact:
    value: Any

    def matches(self, value: Any) -> bool:
        return value is not _MISSING and value == self.value


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match"""
    text: str

    def matches(self, value: Any) -> bool:
        if value is _MISSING or value is None:
            return False
        return self.text.lower() in str(value).lower()


@dataclass(frozen=True)
class Between:
    """Inclusive range; either bound may be omitted"""
    low: Any = None
    high: Any = None

    def matches(self, value: Any) -> bool:
        if value is _MISSING or value is None:
            return False
        try:
            if self.low is not None and value < self.low:
                return False
            if self.high is not None and value > self.high:
                return False
        except TypeError:
            return False
        return True


Rule = Union[_AllRule, Exact, Contains, Between]
FieldKey = Union[str, Tuple[str, ...]]
Criteria = Dict[FieldKey, Rule]


def field_value(item: Any, field: str) -> Any:
    """Read a field from a mapping or an object, _MISSING when absent"""
    if isinstance(item, Mapping):
        return item.get(field, _MISSING)
    return getattr(item, field, _MISSING)


def matches(item: Any, criteria: Mapping[FieldKey, Rule]) -> bool:
    for key, rule in criteria.items():
        if rule is ALL:
            continue
        fields = key if isinstance(key, tuple) else (key,)
        if not any(rule.matches(field_value(item, field)) for field in fields):
            return False
    return True


def apply_filters(items: Iterable[T], criteria: Optional[Mapping[FieldKey, Rule]]) -> List[T]:
    """Return the items matching every criterion, in input order"""
    items = list(items)
    if not criteria:
        return items
    return [item for item in items if matches(item, criteria)]


def choice(value: Optional[str], all_token: str = "all") -> Rule:
    """Select-box value to rule: empty or the "all" option means no constraint"""
    if value is None or value == "" or value == all_token:
        return ALL
    return Exact(value)


def search(text: Optional[str]) -> Rule:
    """Search-box value to rule"""
    if text is None or not text.strip():
        return ALL
    return Contains(text.strip())


def contains(text: Optional[str], all_token: str = "all") -> Rule:
    if text is None or text == "" or text == all_token:
        return ALL
    return Contains(text)
