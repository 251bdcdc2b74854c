"""
storage/query.py

Small PostgREST query description.

A ``Query`` names a table or view, the columns to return, AND-ed filters,
OR-ed filter groups, ordering and an optional row limit.  The HTTP client
turns it into query-string parameters with :meth:`Query.to_params`; the test
suite evaluates the same object against in-memory rows.

Usage
-----
    q = (
        Query("appointments_view")
        .eq("status", "scheduled")
        .gte("start_time", "2025-01-01")
        .ilike_any(["patient_first_name", "patient_last_name"], "ana")
        .order("start_time", desc=True)
    )
    q.to_params()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable

# Characters that PostgREST treats as syntax inside or=(...) groups.
_RESERVED = set(',.:()"\\ ')


def format_value(value: Any) -> str:
    """Render a Python value the way PostgREST expects it in a URL."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return format_value(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _quote(raw: str) -> str:
    if any(ch in _RESERVED for ch in raw):
        escaped = raw.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return raw


@dataclass(frozen=True)
class Filter:
    """One ``column <op> value`` condition."""
    column: str
    op: str  # eq | neq | gt | gte | lt | lte | ilike | in | is
    value: Any

    def operand(self, quoted: bool = False) -> str:
        if self.op == "in":
            items = ",".join(_quote(format_value(v)) for v in self.value)
            return f"in.({items})"
        raw = format_value(self.value)
        if self.op == "ilike":
            # PostgREST accepts * as the wildcard in URLs
            raw = raw.replace("%", "*")
        return f"{self.op}.{_quote(raw) if quoted else raw}"


@dataclass
class Query:
    table: str
    columns: str = "*"
    filters: list[Filter] = field(default_factory=list)
    any_of: list[list[Filter]] = field(default_factory=list)
    order_by: list[tuple[str, bool]] = field(default_factory=list)
    limit_to: int | None = None

    # -------------------------
    # Builders
    # -------------------------
    def select(self, columns: str) -> "Query":
        self.columns = columns
        return self

    def _add(self, column: str, op: str, value: Any) -> "Query":
        self.filters.append(Filter(column, op, value))
        return self

    def eq(self, column: str, value: Any) -> "Query":
        return self._add(column, "eq", value)

    def neq(self, column: str, value: Any) -> "Query":
        return self._add(column, "neq", value)

    def gte(self, column: str, value: Any) -> "Query":
        return self._add(column, "gte", value)

    def lte(self, column: str, value: Any) -> "Query":
        return self._add(column, "lte", value)

    def lt(self, column: str, value: Any) -> "Query":
        return self._add(column, "lt", value)

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        return self._add(column, "in", list(values))

    def ilike_any(self, columns: Iterable[str], term: str) -> "Query":
        """Case-insensitive substring match on at least one of *columns*."""
        self.any_of.append([Filter(c, "ilike", f"%{term}%") for c in columns])
        return self

    def order(self, column: str, desc: bool = False) -> "Query":
        self.order_by.append((column, desc))
        return self

    def limit(self, n: int) -> "Query":
        self.limit_to = n
        return self

    # -------------------------
    # Encoding
    # -------------------------
    def to_params(self) -> list[tuple[str, str]]:
        """Return query-string parameters (a list, since columns may repeat)."""
        params: list[tuple[str, str]] = [("select", self.columns)]
        for f in self.filters:
            params.append((f.column, f.operand()))
        for group in self.any_of:
            inner = ",".join(f"{f.column}.{f.operand(quoted=True)}" for f in group)
            params.append(("or", f"({inner})"))
        if self.order_by:
            params.append(
                ("order", ",".join(f"{c}.{'desc' if d else 'asc'}" for c, d in self.order_by))
            )
        if self.limit_to is not None:
            params.append(("limit", str(self.limit_to)))
        return params
