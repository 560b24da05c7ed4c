"""
Pytest configuration and shared fixtures.
"""

import pytest
from pathlib import Path
from typing import Dict, Any

from jobly.database import Database, init_database
from jobly.repositories import companies, jobs


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Create an empty database with all tables."""
    path = tmp_path / "jobly.db"
    init_database(path)
    return path


@pytest.fixture
def db(db_path):
    """Database executor over an empty database."""
    database = Database(db_path)
    yield database
    database.dispose()


@pytest.fixture
def company_data() -> Dict[str, Any]:
    """Valid new-company payload."""
    return {
        "handle": "c1",
        "name": "C1",
        "description": "Desc1",
        "numEmployees": 1,
        "logoUrl": "http://c1.img",
    }


@pytest.fixture
def seeded_db(db):
    """Database with three companies and four jobs."""
    for n in (1, 2, 3):
        companies.create(db, {
            "handle": f"c{n}",
            "name": f"C{n}",
            "description": f"Desc{n}",
            "numEmployees": n,
            "logoUrl": f"http://c{n}.img",
        })

    jobs.create(db, {"title": "Job1", "salary": 100, "equity": 0.1, "companyHandle": "c1"})
    jobs.create(db, {"title": "Job2", "salary": 200, "equity": 0.2, "companyHandle": "c1"})
    jobs.create(db, {"title": "Job3", "salary": 300, "equity": 0, "companyHandle": "c1"})
    jobs.create(db, {"title": "Engineer", "salary": None, "equity": None, "companyHandle": "c2"})
    return db
