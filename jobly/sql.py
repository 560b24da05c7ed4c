"""
Dynamic SQL fragment builders.

Turns partial updates and list filters into parameterized SQL fragments
with `$n` positional placeholders. Callers interpolate the fragment into
their own statement and continue the placeholder numbering from
`len(fragment.values) + 1`.

Column names and predicate templates must come from static, code-level
configuration. Nothing here escapes identifiers; passing user-controlled
strings as column names is out of contract.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from .errors import NoUpdateData

SqlValue = Union[str, int, float, bool, None]


@dataclass(frozen=True)
class SqlFragment:
    """A SQL fragment and the values bound to its placeholders, in order."""

    clause: str = ""
    values: List[SqlValue] = field(default_factory=list)

    def next_placeholder(self) -> str:
        """Placeholder for the first parameter appended after this fragment."""
        return placeholder(len(self.values) + 1)


@dataclass(frozen=True)
class FilterRule:
    """
    Maps one recognized filter key to a SQL predicate.

    Attributes:
        key: Filter name as supplied by the caller (e.g. "minEmployees")
        template: Predicate with a `{param}` slot for the placeholder,
            e.g. "num_employees >= {param}"
        transform: Optional function producing the value to bind from the
            filter value
        when: Optional condition on the filter value; the predicate is
            skipped when it returns False
    """

    key: str
    template: str
    transform: Optional[Callable[[Any], SqlValue]] = None
    when: Optional[Callable[[Any], bool]] = None

    def applies_to(self, criteria: Mapping[str, Any]) -> bool:
        if self.key not in criteria:
            return False
        return self.when is None or self.when(criteria[self.key])

    def bind(self, value: Any) -> SqlValue:
        return self.transform(value) if self.transform else value


def placeholder(position: int) -> str:
    """Return the positional placeholder for a 1-based parameter position."""
    if isinstance(position, bool) or not isinstance(position, int) or position < 1:
        raise ValueError(f"Placeholder position must be a positive integer, got {position!r}")
    return f"${position}"


def quote_identifier(name: str) -> str:
    return f'"{name}"'


def build_update_clause(
    field_updates: Mapping[str, SqlValue],
    name_map: Mapping[str, str],
) -> SqlFragment:
    """
    Build the SET clause of a partial update.

    Args:
        field_updates: Logical field name -> new value. Iteration order
            decides placeholder order.
        name_map: Logical field name -> column name. Fields missing from
            the map are used as column names verbatim.

    Returns:
        SqlFragment such as '"first_name"=$1, "age"=$2' with values
        ["Aliya", 32]

    Raises:
        NoUpdateData: If field_updates is empty
    """
    if not field_updates:
        raise NoUpdateData()

    assignments: List[str] = []
    values: List[SqlValue] = []
    for logical_name, value in field_updates.items():
        column = name_map.get(logical_name, logical_name)
        values.append(value)
        assignments.append(f"{quote_identifier(column)}={placeholder(len(values))}")

    return SqlFragment(", ".join(assignments), values)


def build_filter_clause(
    criteria: Mapping[str, SqlValue],
    rules: Sequence[FilterRule],
) -> SqlFragment:
    """
    Build the body of a WHERE clause from the filters present in criteria.

    Rules are applied in their declared order, never in the order of
    criteria, so the same set of keys always yields the same SQL. Keys
    without a rule are ignored.

    Returns:
        SqlFragment joined with " AND ". An empty clause means "no
        filtering"; callers must then omit the WHERE keyword.
    """
    predicates: List[str] = []
    values: List[SqlValue] = []
    for rule in rules:
        if not rule.applies_to(criteria):
            continue
        values.append(rule.bind(criteria[rule.key]))
        predicates.append(rule.template.format(param=placeholder(len(values))))

    return SqlFragment(" AND ".join(predicates), values)


def where(fragment: SqlFragment) -> str:
    """Render a filter fragment as a WHERE clause, or "" when it is empty."""
    return f"WHERE {fragment.clause}" if fragment.clause else ""


def escape_like(value: Any) -> Any:
    """Escape LIKE wildcards so % and _ in filter text match literally."""
    if not isinstance(value, str):
        return value
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_ignore_case(column: str) -> str:
    """
    Predicate template for a case-insensitive partial match on column.

    Pair it with the escape_like transform. lower() folds ASCII letters only
    on SQLite, so accented letters only match in the same case there.
    """
    return f"lower({column}) LIKE '%' || lower({{param}}) || '%' ESCAPE '\\'"
