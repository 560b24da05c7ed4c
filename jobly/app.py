import argparse
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from . import __version__
from .database import Database, init_database
from .env import get_database_path, load_env
from .errors import JoblyError
from .logger import get_logger, reset_logger
from .repositories import companies, jobs
from .schema import (
    coerce_company_filters,
    coerce_job_filters,
    validate_company_new,
    validate_company_update,
    validate_job_new,
    validate_job_update,
)


def _print_json(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _load_input(path: str) -> Dict[str, Any]:
    input_path = Path(path)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise SystemExit("Input must be a JSON object")
    return data


def _check(errors: List[str]) -> None:
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)


def _validated_input(path: str, validator: Callable[[Dict[str, Any]], List[str]]) -> Dict[str, Any]:
    data = _load_input(path)
    _check(validator(data))
    return data


def _open_db(args: argparse.Namespace) -> Database:
    db_path = Path(args.db) if args.db else get_database_path()
    if not db_path.exists():
        raise SystemExit(f"Database not found: {db_path}. Run 'jobly init-db' first.")
    return Database(db_path)


def cmd_init_db(args: argparse.Namespace) -> None:
    db_path = Path(args.db) if args.db else get_database_path()
    init_database(db_path)
    print(f"Initialized database at {db_path}")


def cmd_companies(args: argparse.Namespace) -> None:
    raw = {}
    if args.name is not None:
        raw["name"] = args.name
    if args.min_employees is not None:
        raw["minEmployees"] = args.min_employees
    if args.max_employees is not None:
        raw["maxEmployees"] = args.max_employees
    criteria, errors = coerce_company_filters(raw)
    _check(errors)
    _print_json({"companies": companies.find_all(_open_db(args), criteria)})


def cmd_company(args: argparse.Namespace) -> None:
    _print_json({"company": companies.get(_open_db(args), args.handle)})


def cmd_add_company(args: argparse.Namespace) -> None:
    data = _validated_input(args.input, validate_company_new)
    _print_json({"company": companies.create(_open_db(args), data)})


def cmd_update_company(args: argparse.Namespace) -> None:
    data = _validated_input(args.input, validate_company_update)
    _print_json({"company": companies.update(_open_db(args), args.handle, data)})


def cmd_remove_company(args: argparse.Namespace) -> None:
    companies.remove(_open_db(args), args.handle)
    _print_json({"deleted": args.handle})


def cmd_jobs(args: argparse.Namespace) -> None:
    raw = {}
    if args.title is not None:
        raw["title"] = args.title
    if args.min_salary is not None:
        raw["minSalary"] = args.min_salary
    if args.has_equity is not None:
        raw["hasEquity"] = args.has_equity
    criteria, errors = coerce_job_filters(raw)
    _check(errors)
    _print_json({"jobs": jobs.find_all(_open_db(args), criteria)})


def cmd_job(args: argparse.Namespace) -> None:
    _print_json({"job": jobs.get(_open_db(args), args.id)})


def cmd_add_job(args: argparse.Namespace) -> None:
    data = _validated_input(args.input, validate_job_new)
    _print_json({"job": jobs.create(_open_db(args), data)})


def cmd_update_job(args: argparse.Namespace) -> None:
    data = _validated_input(args.input, validate_job_update)
    _print_json({"job": jobs.update(_open_db(args), args.id, data)})


def cmd_remove_job(args: argparse.Namespace) -> None:
    jobs.remove(_open_db(args), args.id)
    _print_json({"deleted": args.id})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobly", description="Jobly: companies and jobs")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", help="Path to SQLite database (default: $JOBLY_DATABASE_PATH or data/jobly.db)")

    subparsers = parser.add_subparsers(dest="command")

    init = subparsers.add_parser("init-db", help="Create the database and its tables")
    init.set_defaults(func=cmd_init_db)

    lst = subparsers.add_parser("companies", help="List companies, optionally filtered")
    lst.add_argument("--name", help="Case-insensitive partial match on name")
    lst.add_argument("--min-employees", help="Minimum number of employees")
    lst.add_argument("--max-employees", help="Maximum number of employees")
    lst.set_defaults(func=cmd_companies)

    show = subparsers.add_parser("company", help="Show a company and its jobs")
    show.add_argument("handle", help="Company handle")
    show.set_defaults(func=cmd_company)

    add = subparsers.add_parser("add-company", help="Create a company from a JSON file")
    add.add_argument("--input", required=True, help="Path to JSON {handle, name, description, numEmployees, logoUrl}")
    add.set_defaults(func=cmd_add_company)

    upd = subparsers.add_parser("update-company", help="Partially update a company from a JSON file")
    upd.add_argument("handle", help="Company handle")
    upd.add_argument("--input", required=True, help="Path to JSON with any of {name, description, numEmployees, logoUrl}")
    upd.set_defaults(func=cmd_update_company)

    rm = subparsers.add_parser("remove-company", help="Delete a company and its jobs")
    rm.add_argument("handle", help="Company handle")
    rm.set_defaults(func=cmd_remove_company)

    jlst = subparsers.add_parser("jobs", help="List jobs, optionally filtered")
    jlst.add_argument("--title", help="Case-insensitive partial match on title")
    jlst.add_argument("--min-salary", help="Minimum salary")
    jlst.add_argument("--has-equity", choices=["true", "false"], help="Only jobs with equity when true")
    jlst.set_defaults(func=cmd_jobs)

    jshow = subparsers.add_parser("job", help="Show a job")
    jshow.add_argument("id", type=int, help="Job id")
    jshow.set_defaults(func=cmd_job)

    jadd = subparsers.add_parser("add-job", help="Create a job from a JSON file")
    jadd.add_argument("--input", required=True, help="Path to JSON {title, salary, equity, companyHandle}")
    jadd.set_defaults(func=cmd_add_job)

    jupd = subparsers.add_parser("update-job", help="Partially update a job from a JSON file")
    jupd.add_argument("id", type=int, help="Job id")
    jupd.add_argument("--input", required=True, help="Path to JSON with any of {title, salary, equity}")
    jupd.set_defaults(func=cmd_update_job)

    jrm = subparsers.add_parser("remove-job", help="Delete a job")
    jrm.add_argument("id", type=int, help="Job id")
    jrm.set_defaults(func=cmd_remove_job)

    return parser


def main(argv: Optional[List[str]] = None):
    # Load .env if present (JOBLY_DATABASE_PATH, JOBLY_LOG_LEVEL, ...)
    load_env()
    # Rebuild the logger so JOBLY_LOG_* values from .env take effect
    reset_logger()
    get_logger()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args)
    except JoblyError as e:
        raise SystemExit(f"Error ({e.status}): {e.message}")


if __name__ == "__main__":
    main()
