import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATABASE_PATH = Path("data") / "jobly.db"
DEFAULT_LOG_LEVEL = "INFO"


def load_env() -> None:
    """Load .env from the working directory if present.

    Variables already set in the environment win over the file.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def get_database_path() -> Path:
    return Path(os.getenv("JOBLY_DATABASE_PATH", str(DEFAULT_DATABASE_PATH)))


def get_log_level() -> str:
    return os.getenv("JOBLY_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def get_log_dir() -> Optional[Path]:
    """Directory for log files; file logging is off when unset."""
    log_dir = os.getenv("JOBLY_LOG_DIR")
    return Path(log_dir) if log_dir else None
