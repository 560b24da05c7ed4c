"""
Jobs Repository.

Responsibilities:
- CRUD operations for the jobs table.
- Declares the job column-name map and list filters.

Non-Responsibilities:
- No payload validation (see jobly.schema).
- No coercion of filter values.

Invariant:
Every statement's placeholders line up with its parameter list.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..database import Database
from ..errors import NotFoundError
from ..logger import get_logger
from ..sql import (
    FilterRule,
    build_filter_clause,
    build_update_clause,
    contains_ignore_case,
    escape_like,
    where,
)

COLUMN_NAMES: Dict[str, str] = {
    "companyHandle": "company_handle",
}

def _zero(_flag: Any) -> int:
    return 0

def _is_true(flag: Any) -> bool:
    return flag is True

# hasEquity=false means "don't filter", not "jobs without equity"
FILTER_RULES = (
    FilterRule("title", contains_ignore_case("title"), transform=escape_like),
    FilterRule("minSalary", "salary >= {param}"),
    FilterRule("hasEquity", "equity > {param}", transform=_zero, when=_is_true),
)

_COLUMNS = """
    id,
    title,
    salary,
    equity,
    company_handle AS "companyHandle"
"""

def create(db: Database, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Create a job for an existing company.

    Args:
        data: {title, salary, equity, companyHandle}

    Returns:
        {id, title, salary, equity, companyHandle}

    Raises:
        NotFoundError: If companyHandle names no company
    """
    company_handle = data["companyHandle"]
    company = db.execute("SELECT handle FROM companies WHERE handle = $1", [company_handle])
    if not company:
        raise NotFoundError(f"No company: {company_handle}")

    rows = db.execute(
        f"""
        INSERT INTO jobs (title, salary, equity, company_handle)
        VALUES ($1, $2, $3, $4)
        RETURNING {_COLUMNS}""",
        [data["title"], data.get("salary"), data.get("equity"), company_handle],
    )
    get_logger().info("Job created", id=rows[0]["id"], company_handle=company_handle)
    return rows[0]

def find_all(db: Database, criteria: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    List jobs ordered by id.

    Args:
        criteria: Optional {title, minSalary, hasEquity}, already coerced
    """
    filters = build_filter_clause(criteria or {}, FILTER_RULES)
    return db.execute(
        f"""
        SELECT {_COLUMNS}
        FROM jobs
        {where(filters)}
        ORDER BY id""",
        filters.values,
    )

def get(db: Database, job_id: int) -> Dict[str, Any]:
    rows = db.execute(
        f"""
        SELECT {_COLUMNS}
        FROM jobs
        WHERE id = $1""",
        [job_id],
    )
    if not rows:
        raise NotFoundError(f"No job: {job_id}")
    return rows[0]

def update(db: Database, job_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partially update a job; only the fields present in data change.

    Raises:
        NoUpdateData: If data is empty
        NotFoundError: If no such job
    """
    set_clause = build_update_clause(data, COLUMN_NAMES)
    rows = db.execute(
        f"""
        UPDATE jobs
        SET {set_clause.clause}
        WHERE id = {set_clause.next_placeholder()}
        RETURNING {_COLUMNS}""",
        [*set_clause.values, job_id],
    )
    if not rows:
        raise NotFoundError(f"No job: {job_id}")

    get_logger().info("Job updated", id=job_id, fields=list(data))
    return rows[0]

def remove(db: Database, job_id: int) -> None:
    rows = db.execute("DELETE FROM jobs WHERE id = $1 RETURNING id", [job_id])
    if not rows:
        raise NotFoundError(f"No job: {job_id}")
    get_logger().info("Job removed", id=job_id)
