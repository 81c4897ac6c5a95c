"""
Configuration module for the table browser service.

This module handles all configuration including:
- MySQL connection settings
- Connection pool sizing
- HTTP server and logging settings
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, List

# Load .env file BEFORE any os.getenv calls
from dotenv import load_dotenv
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to the default when unparsable."""
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass
class DatabaseConfig:
    """
    MySQL connection and pool configuration.

    All sensitive values are loaded from environment variables.
    """
    host: str = field(default_factory=lambda: os.getenv("MYSQL_HOST", "localhost"))
    port: int = field(default_factory=lambda: _env_int("MYSQL_PORT", 3306))
    database: str = field(default_factory=lambda: os.getenv("MYSQL_DB", ""))
    username: str = field(default_factory=lambda: os.getenv("MYSQL_USER", ""))
    password: str = field(default_factory=lambda: os.getenv("MYSQL_PASSWORD", ""))

    # SSL configuration
    ssl_ca: Optional[str] = field(default_factory=lambda: os.getenv("MYSQL_SSL_CA", None))

    # Pool sizing (QueuePool)
    pool_size: int = field(default_factory=lambda: _env_int("DB_POOL_SIZE", 5))
    max_overflow: int = field(default_factory=lambda: _env_int("DB_MAX_OVERFLOW", 10))
    pool_timeout: int = field(default_factory=lambda: _env_int("DB_POOL_TIMEOUT", 30))
    pool_recycle: int = field(default_factory=lambda: _env_int("DB_POOL_RECYCLE", 1800))

    @property
    def connection_string(self) -> str:
        """Generate SQLAlchemy connection string."""
        base_url = f"mysql+pymysql://{self.username}:{self.password}@{self.host}:{self.port}/{self.database}"
        if self.ssl_ca:
            return f"{base_url}?ssl_ca={self.ssl_ca}"
        return base_url

    @property
    def max_connections(self) -> int:
        """Upper bound on simultaneously checked-out connections."""
        return max(1, self.pool_size + max(0, self.max_overflow))

    def is_configured(self) -> bool:
        """Check if all required database settings are configured."""
        return all([self.host, self.database, self.username, self.password])


@dataclass
class ServerConfig:
    """HTTP server and logging settings."""
    host: str = field(default_factory=lambda: os.getenv("APP_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("APP_PORT", 8080))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "info"))


class AppConfig:
    """
    Main application configuration aggregator.

    Combines all configuration sections and provides
    validation methods.
    """

    def __init__(self, database: Optional[DatabaseConfig] = None, server: Optional[ServerConfig] = None):
        self.database = database or DatabaseConfig()
        self.server = server or ServerConfig()

    def validate(self) -> tuple[bool, List[str]]:
        """
        Validate all configuration settings.

        Returns:
            tuple: (is_valid, list of error messages)
        """
        errors = []

        if not self.database.is_configured():
            errors.append("MySQL configuration incomplete. Check MYSQL_* environment variables.")

        if not 0 < self.server.port < 65536:
            errors.append(f"Invalid APP_PORT: {self.server.port}")

        return len(errors) == 0, errors

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()
