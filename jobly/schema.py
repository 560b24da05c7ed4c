"""
Payload validation and filter coercion.

Validators return a list of error messages; an empty list means valid.
Filter coercion turns raw query values (strings from a command line or a
query string) into typed criteria before they reach the SQL builders.
"""

from typing import Any, Dict, List, Tuple
from urllib.parse import urlparse

MAX_HANDLE_LENGTH = 25

COMPANY_NEW_FIELDS = {"handle", "name", "description", "numEmployees", "logoUrl"}
COMPANY_UPDATE_FIELDS = {"name", "description", "numEmployees", "logoUrl"}
JOB_NEW_FIELDS = {"title", "salary", "equity", "companyHandle"}
JOB_UPDATE_FIELDS = {"title", "salary", "equity"}

COMPANY_FILTER_KEYS = ("name", "minEmployees", "maxEmployees")
JOB_FILTER_KEYS = ("title", "minSalary", "hasEquity")


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_non_negative_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v >= 0


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _valid_url(v: str) -> bool:
    try:
        p = urlparse(v)
        return bool(p.scheme and p.netloc)
    except ValueError:
        return False


def _unknown_fields(data: Dict[str, Any], allowed: set) -> List[str]:
    return [f"Unknown field: {f}" for f in sorted(set(data) - allowed)]


def _company_field_errors(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    if "name" in data and not _is_non_empty_str(data["name"]):
        errors.append("Field 'name' must be a non-empty string")
    if "description" in data and not isinstance(data["description"], str):
        errors.append("Field 'description' must be a string")
    if "numEmployees" in data and data["numEmployees"] is not None:
        if not _is_non_negative_int(data["numEmployees"]):
            errors.append("Field 'numEmployees' must be an integer >= 0")
    if "logoUrl" in data and data["logoUrl"] is not None:
        if not isinstance(data["logoUrl"], str) or not _valid_url(data["logoUrl"]):
            errors.append("Field 'logoUrl' must be a valid absolute URL (scheme + host)")
    return errors


def _job_field_errors(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    if "title" in data and not _is_non_empty_str(data["title"]):
        errors.append("Field 'title' must be a non-empty string")
    if "salary" in data and data["salary"] is not None:
        if not _is_non_negative_int(data["salary"]):
            errors.append("Field 'salary' must be an integer >= 0")
    if "equity" in data and data["equity"] is not None:
        if not _is_number(data["equity"]) or not 0 <= data["equity"] <= 1:
            errors.append("Field 'equity' must be a number between 0 and 1")
    return errors


def validate_company_new(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []

    for f in ("handle", "name", "description"):
        if f not in data:
            errors.append(f"Missing required field: {f}")

    if "handle" in data:
        handle = data["handle"]
        if not _is_non_empty_str(handle):
            errors.append("Field 'handle' must be a non-empty string")
        elif len(handle) > MAX_HANDLE_LENGTH:
            errors.append(f"Field 'handle' length must be at most {MAX_HANDLE_LENGTH}")

    errors.extend(_company_field_errors(data))
    errors.extend(_unknown_fields(data, COMPANY_NEW_FIELDS))
    return errors


def validate_company_update(data: Dict[str, Any]) -> List[str]:
    """Partial update: every field optional, handle not changeable."""
    errors = _company_field_errors(data)
    if "handle" in data:
        errors.append("Field 'handle' cannot be updated")
        data = {k: v for k, v in data.items() if k != "handle"}
    errors.extend(_unknown_fields(data, COMPANY_UPDATE_FIELDS))
    return errors


def validate_job_new(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []

    for f in ("title", "companyHandle"):
        if f not in data:
            errors.append(f"Missing required field: {f}")

    if "companyHandle" in data and not _is_non_empty_str(data["companyHandle"]):
        errors.append("Field 'companyHandle' must be a non-empty string")

    errors.extend(_job_field_errors(data))
    errors.extend(_unknown_fields(data, JOB_NEW_FIELDS))
    return errors


def validate_job_update(data: Dict[str, Any]) -> List[str]:
    """Partial update: title, salary and equity only."""
    errors = _job_field_errors(data)
    for f in ("id", "companyHandle"):
        if f in data:
            errors.append(f"Field '{f}' cannot be updated")
    errors.extend(_unknown_fields(data, JOB_UPDATE_FIELDS | {"id", "companyHandle"}))
    return errors


def _coerce_non_negative_int(key: str, value: Any, errors: List[str]) -> Any:
    if _is_non_negative_int(value):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    errors.append(f"Filter '{key}' must be an integer >= 0")
    return None


def _coerce_bool(key: str, value: Any, errors: List[str]) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    errors.append(f"Filter '{key}' must be true or false")
    return None


def range_errors(criteria: Dict[str, Any], low: str, high: str) -> List[str]:
    """Reject a range whose lower bound exceeds its upper bound.

    Expects coerced values; non-integers are left to the type checks.
    """
    lo, hi = criteria.get(low), criteria.get(high)
    if _is_number(lo) and _is_number(hi) and lo > hi:
        return [f"Filter '{low}' cannot be greater than '{high}'"]
    return []


def coerce_company_filters(raw: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Coerce company list filters.

    Args:
        raw: {name, minEmployees, maxEmployees}, values as strings or
            already typed

    Returns:
        Tuple of (criteria, errors). The min/max check runs after
        coercion, so "abc" is reported as a type error, never compared.
    """
    errors: List[str] = [f"Unknown filter: {k}" for k in sorted(set(raw) - set(COMPANY_FILTER_KEYS))]
    criteria: Dict[str, Any] = {}

    if "name" in raw:
        if _is_non_empty_str(raw["name"]):
            criteria["name"] = raw["name"]
        else:
            errors.append("Filter 'name' must be a non-empty string")

    for key in ("minEmployees", "maxEmployees"):
        if key in raw:
            value = _coerce_non_negative_int(key, raw[key], errors)
            if value is not None:
                criteria[key] = value

    errors.extend(range_errors(criteria, "minEmployees", "maxEmployees"))
    return criteria, errors


def coerce_job_filters(raw: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Coerce job list filters: {title, minSalary, hasEquity}."""
    errors: List[str] = [f"Unknown filter: {k}" for k in sorted(set(raw) - set(JOB_FILTER_KEYS))]
    criteria: Dict[str, Any] = {}

    if "title" in raw:
        if _is_non_empty_str(raw["title"]):
            criteria["title"] = raw["title"]
        else:
            errors.append("Filter 'title' must be a non-empty string")

    if "minSalary" in raw:
        value = _coerce_non_negative_int("minSalary", raw["minSalary"], errors)
        if value is not None:
            criteria["minSalary"] = value

    if "hasEquity" in raw:
        value = _coerce_bool("hasEquity", raw["hasEquity"], errors)
        if value is not None:
            criteria["hasEquity"] = value

    return criteria, errors
