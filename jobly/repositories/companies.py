"""
Companies Repository.

Responsibilities:
- CRUD operations for the companies table.
- Declares the company column-name map and list filters.

Non-Responsibilities:
- No payload validation (see jobly.schema).
- No coercion of filter values.

Invariant:
Every statement's placeholders line up with its parameter list.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..database import Database
from ..errors import BadRequestError, NotFoundError
from ..logger import get_logger
from ..schema import range_errors
from ..sql import (
    FilterRule,
    build_filter_clause,
    build_update_clause,
    contains_ignore_case,
    escape_like,
    where,
)

COLUMN_NAMES: Dict[str, str] = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}

FILTER_RULES = (
    FilterRule("name", contains_ignore_case("name"), transform=escape_like),
    FilterRule("minEmployees", "num_employees >= {param}"),
    FilterRule("maxEmployees", "num_employees <= {param}"),
)

_COLUMNS = """
    handle,
    name,
    description,
    num_employees AS "numEmployees",
    logo_url AS "logoUrl"
"""

def create(db: Database, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Create a company.

    Args:
        data: {handle, name, description, numEmployees, logoUrl}

    Returns:
        {handle, name, description, numEmployees, logoUrl}

    Raises:
        BadRequestError: If the handle is already taken
    """
    handle = data["handle"]
    duplicate = db.execute("SELECT handle FROM companies WHERE handle = $1", [handle])
    if duplicate:
        raise BadRequestError(f"Duplicate company: {handle}")

    rows = db.execute(
        f"""
        INSERT INTO companies (handle, name, description, num_employees, logo_url)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING {_COLUMNS}""",
        [
            handle,
            data["name"],
            data["description"],
            data.get("numEmployees"),
            data.get("logoUrl"),
        ],
    )
    get_logger().info("Company created", handle=handle)
    return rows[0]

def find_all(db: Database, criteria: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    List companies ordered by name.

    Args:
        criteria: Optional {name, minEmployees, maxEmployees}, already coerced.
            name is a case-insensitive partial match.

    Raises:
        BadRequestError: If minEmployees is greater than maxEmployees
    """
    criteria = criteria or {}
    errors = range_errors(dict(criteria), "minEmployees", "maxEmployees")
    if errors:
        raise BadRequestError(errors)

    filters = build_filter_clause(criteria, FILTER_RULES)
    return db.execute(
        f"""
        SELECT {_COLUMNS}
        FROM companies
        {where(filters)}
        ORDER BY name""",
        filters.values,
    )

def get(db: Database, handle: str) -> Dict[str, Any]:
    """
    Return a company with its jobs.

    Returns:
        {handle, name, description, numEmployees, logoUrl, jobs}
        where jobs is [{id, title, salary, equity}, ...]

    Raises:
        NotFoundError: If no such company
    """
    rows = db.execute(
        f"""
        SELECT {_COLUMNS}
        FROM companies
        WHERE handle = $1""",
        [handle],
    )
    if not rows:
        raise NotFoundError(f"No company: {handle}")

    company = rows[0]
    company["jobs"] = db.execute(
        """
        SELECT id, title, salary, equity
        FROM jobs
        WHERE company_handle = $1
        ORDER BY salary, id""",
        [handle],
    )
    return company

def update(db: Database, handle: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partially update a company; only the fields present in data change.

    Args:
        data: Any of {name, description, numEmployees, logoUrl}

    Raises:
        NoUpdateData: If data is empty
        NotFoundError: If no such company
    """
    set_clause = build_update_clause(data, COLUMN_NAMES)
    rows = db.execute(
        f"""
        UPDATE companies
        SET {set_clause.clause}
        WHERE handle = {set_clause.next_placeholder()}
        RETURNING {_COLUMNS}""",
        [*set_clause.values, handle],
    )
    if not rows:
        raise NotFoundError(f"No company: {handle}")

    get_logger().info("Company updated", handle=handle, fields=list(data))
    return rows[0]

def remove(db: Database, handle: str) -> None:
    """Delete a company and, through the foreign key, its jobs."""
    rows = db.execute("DELETE FROM companies WHERE handle = $1 RETURNING handle", [handle])
    if not rows:
        raise NotFoundError(f"No company: {handle}")
    get_logger().info("Company removed", handle=handle)
