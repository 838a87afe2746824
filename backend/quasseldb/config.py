"""
Database Configuration Management
Reads connection settings from environment variables (and a .env file)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .base import POSTGRES, SQLITE, normalize_db_type

# Load from .env in the backend directory, never overriding the real environment
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path, override=False)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class DatabaseConfig:
    """Connection settings for a Quassel core database"""
    db_type: str = POSTGRES
    host: str = "localhost"
    port: Optional[str] = None
    username: str = "quassel"
    password: str = ""
    database: str = "quassel"
    path: str = "quassel-storage.sqlite"
    echo: bool = False

    def __post_init__(self):
        """Validate configuration after initialization"""
        self.validate()

    def validate(self):
        """Validate database configuration"""
        # Raises ValueError for unknown backends
        self.db_type = normalize_db_type(self.db_type)

        if self.db_type == SQLITE:
            if not self.path:
                raise ValueError("QUASSEL_DB_PATH is required for SQLite")
            return

        if not self.host:
            raise ValueError("QUASSEL_DB_HOST is required for PostgreSQL")

        if self.port is not None and not str(self.port).isdigit():
            raise ValueError(f"QUASSEL_DB_PORT must be numeric: {self.port}")

    def credentials(self) -> list:
        """Positional credentials in the order QuasselDB.connect expects."""
        if self.db_type == SQLITE:
            return [self.path]
        return [self.host, self.username, self.password, self.database]

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Load configuration from QUASSEL_DB_* environment variables."""
        return cls(
            db_type=os.getenv("QUASSEL_DB_TYPE", POSTGRES),
            host=os.getenv("QUASSEL_DB_HOST", "localhost"),
            port=os.getenv("QUASSEL_DB_PORT") or None,
            username=os.getenv("QUASSEL_DB_USER", "quassel"),
            password=os.getenv("QUASSEL_DB_PASSWORD", ""),
            database=os.getenv("QUASSEL_DB_NAME", "quassel"),
            path=os.getenv("QUASSEL_DB_PATH", "quassel-storage.sqlite"),
            echo=_env_bool("QUASSEL_DB_ECHO"),
        )
