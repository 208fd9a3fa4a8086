"""
Structured SQL predicate builder.

A Predicate collects boolean clauses that are ANDed together, each with
the named parameters it binds. Every value that came from a user is
bound through a ``:name`` placeholder; clause text only ever contains
column names, operators and placeholders.

Invariants enforced on every ``add``:
- parameter names are unique across the whole predicate
- a clause supplies exactly the placeholders it references
"""

import re
from typing import Any, Iterable, Optional

from ..exceptions import PredicateError

# ":name" placeholders; "::" casts are not placeholders
PLACEHOLDER_PATTERN = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")

MATCH_ALL = "1 = 1"
MATCH_NONE = "1 = 0"

LIKE_ESCAPE_CHAR = "\\"


def placeholders(sql: str) -> set[str]:
    """Return the parameter names referenced in a SQL fragment."""
    return set(PLACEHOLDER_PATTERN.findall(sql))


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so the text matches literally."""
    return (
        text.replace(LIKE_ESCAPE_CHAR, LIKE_ESCAPE_CHAR * 2)
        .replace("%", LIKE_ESCAPE_CHAR + "%")
        .replace("_", LIKE_ESCAPE_CHAR + "_")
    )


class Predicate:
    """
    Ordered AND-combination of parameter-bound clauses.

    Example:
        predicate = Predicate()
        predicate.add("courseid = :courseid", {"courseid": 5})
        predicate.add_in("edulevel", [0, 1, 2], prefix="edulevel")
        predicate.where   # "courseid = :courseid AND edulevel IN (...)"
        predicate.params  # {"courseid": 5, "edulevel1": 0, ...}
    """

    def __init__(self):
        self._clauses: list[str] = []
        self._params: dict[str, Any] = {}
        self._counters: dict[str, int] = {}

    # =========================================================================
    # Building
    # =========================================================================

    def add(self, sql: str, params: Optional[dict[str, Any]] = None) -> "Predicate":
        """
        Append a clause with the parameters it binds.

        Raises:
            PredicateError: If the clause is empty, a parameter name is
                already bound, or clause and parameters disagree.
        """
        sql = sql.strip()
        if not sql:
            raise PredicateError("Predicate clause must not be empty")

        params = dict(params or {})
        referenced = placeholders(sql)
        supplied = set(params)

        if referenced != supplied:
            missing = sorted(referenced - supplied)
            unused = sorted(supplied - referenced)
            raise PredicateError(
                f"Clause '{sql}' parameters mismatch: "
                f"missing={missing}, unused={unused}"
            )

        collisions = sorted(supplied & set(self._params))
        if collisions:
            raise PredicateError(
                f"Parameter names already bound: {', '.join(collisions)}"
            )

        self._clauses.append(sql)
        self._params.update(params)
        return self

    def extend(self, sql: str, params: dict[str, Any]) -> "Predicate":
        """Append a (sql, params) pair produced by a clause helper."""
        return self.add(sql, params)

    def unique_name(self, prefix: str) -> str:
        """Generate a parameter name not yet bound; numbering is per prefix."""
        while True:
            self._counters[prefix] = self._counters.get(prefix, 0) + 1
            name = f"{prefix}{self._counters[prefix]}"
            if name not in self._params:
                return name

    def in_clause(
        self,
        column: str,
        values: Iterable[Any],
        prefix: str,
        equal: bool = True,
    ) -> tuple[str, dict[str, Any]]:
        """
        Build an IN / NOT IN fragment with one bound parameter per value.

        A single value renders as ``=`` / ``<>``. Names are reserved
        against this predicate but the fragment is not appended.

        Raises:
            PredicateError: If no values are given
        """
        values = list(values)
        if not values:
            raise PredicateError(f"IN list for '{column}' must not be empty")

        params = {}
        for value in values:
            params[self.unique_name(prefix)] = value

        names = list(params)
        if len(names) == 1:
            operator = "=" if equal else "<>"
            return f"{column} {operator} :{names[0]}", params

        operator = "IN" if equal else "NOT IN"
        placeholder_list = ", ".join(f":{name}" for name in names)
        return f"{column} {operator} ({placeholder_list})", params

    def add_in(
        self,
        column: str,
        values: Iterable[Any],
        prefix: str,
        equal: bool = True,
    ) -> "Predicate":
        """Append an IN / NOT IN clause over bound values."""
        sql, params = self.in_clause(column, values, prefix, equal)
        return self.add(sql, params)

    def add_like(self, column: str, text: str, name: str) -> "Predicate":
        """Append a literal substring match on a column."""
        return self.add(
            f"{column} LIKE :{name} ESCAPE '{LIKE_ESCAPE_CHAR}'",
            {name: f"%{escape_like(text)}%"},
        )

    def add_false(self) -> "Predicate":
        """Append a clause that matches no rows."""
        return self.add(MATCH_NONE)

    # =========================================================================
    # Output
    # =========================================================================

    @property
    def clauses(self) -> tuple[str, ...]:
        return tuple(self._clauses)

    @property
    def params(self) -> dict[str, Any]:
        """Copy of the bound parameters."""
        return dict(self._params)

    @property
    def where(self) -> str:
        """Clauses joined with AND, or a match-everything clause when empty."""
        if not self._clauses:
            return MATCH_ALL
        return " AND ".join(
            f"({clause})" if re.search(r"\bOR\b", clause, re.IGNORECASE) else clause
            for clause in self._clauses
        )

    def is_empty(self) -> bool:
        return not self._clauses

    def __repr__(self) -> str:
        return f"Predicate(where={self.where!r}, params={self._params!r})"
