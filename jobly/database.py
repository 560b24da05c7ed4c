"""
Database schema, connection management and the query executor.

Uses SQLite with SQLAlchemy. Tables are declared with the ORM so they can
be created in one call; reads and writes go through `Database.execute`,
which runs hand-written SQL with `$n` positional placeholders.
"""

from pathlib import Path
from typing import Any, Dict, List, Sequence

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import declarative_base

from .errors import BadRequestError, DatabaseError
from .logger import get_logger
from .retry import RetryError, exponential_backoff, is_transient_error
from .sql import SqlValue

Base = declarative_base()

class Company(Base):
    """Company model."""

    __tablename__ = "companies"

    handle = Column(String(25), primary_key=True)
    name = Column(Text, nullable=False, unique=True)
    num_employees = Column(Integer, CheckConstraint("num_employees >= 0"))
    description = Column(Text, nullable=False)
    logo_url = Column(Text)

class Job(Base):
    """Job posting model."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    salary = Column(Integer, CheckConstraint("salary >= 0"))
    equity = Column(Float, CheckConstraint("equity >= 0 AND equity <= 1.0"))
    company_handle = Column(
        String(25),
        ForeignKey("companies.handle", ondelete="CASCADE"),
        nullable=False,
    )

def get_engine(db_path: Path) -> Engine:
    """
    Create an engine for a SQLite database file.

    Foreign keys are enforced on every connection so deleting a company
    removes its jobs.
    """
    engine = create_engine(f"sqlite:///{db_path}")

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine

def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
    engine.dispose()

def bind_positional(params: Sequence[SqlValue]) -> Dict[str, SqlValue]:
    """
    Key positional values by placeholder number.

    SQLite reads `$1` as a named parameter called "1", so params[0] is
    bound under "1", params[1] under "2", and so on.
    """
    return {str(position): value for position, value in enumerate(params, start=1)}

class Database:
    """Runs parameterized statements against one SQLite database."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.engine = get_engine(db_path)

    def execute(self, sql: str, params: Sequence[SqlValue] = ()) -> List[Dict[str, Any]]:
        """
        Run one statement in its own transaction.

        Args:
            sql: Statement using `$1..$n` placeholders
            params: Values bound by position, params[n-1] to `$n`

        Returns:
            Result rows as dicts keyed by column name; [] when the
            statement returns no rows

        Raises:
            BadRequestError: On integrity violations (duplicate key,
                failed CHECK, missing foreign key)
            DatabaseError: On any other database failure
        """
        logger = get_logger()
        logger.debug("Executing statement", sql=" ".join(sql.split()), params=len(params))
        try:
            rows = self._run(sql, bind_positional(params))
        except IntegrityError as e:
            logger.record_query_failure("IntegrityError")
            logger.warning("Constraint violated", error=str(e.orig))
            raise BadRequestError(
                f"Constraint violated: {e.orig}", details={"error": str(e.orig)}
            ) from e
        except RetryError as e:
            logger.record_query_failure("RetryError")
            logger.error("Database busy, giving up", error=str(e))
            raise DatabaseError(str(e), details={"db_path": str(self.db_path)}) from e
        except SQLAlchemyError as e:
            logger.record_query_failure(type(e).__name__)
            logger.error("Statement failed", error=str(e))
            raise DatabaseError(
                f"Statement failed: {type(e).__name__}", details={"error": str(e)}
            ) from e

        logger.record_query(len(rows))
        return rows

    @exponential_backoff(
        max_retries=3,
        base_delay=0.05,
        max_delay=1.0,
        exceptions=(OperationalError,),
        should_retry=is_transient_error,
    )
    def _run(self, sql: str, bound: Dict[str, SqlValue]) -> List[Dict[str, Any]]:
        with self.engine.begin() as conn:
            result = conn.exec_driver_sql(sql, bound)
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings()]

    def dispose(self) -> None:
        """Close pooled connections."""
        self.engine.dispose()
