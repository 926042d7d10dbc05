# flowgate/config.py

"""
Central configuration for the FlowGate analysis glue.
Values are loaded from environment variables or a .env file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


# ---------------------------------------------------------
#  Remote analysis engines
# ---------------------------------------------------------

HTTP_TIMEOUT = float(os.getenv("FLOWGATE_HTTP_TIMEOUT", "30"))

# Galaxy library and history that FlowGate submissions live in
GALAXY_LIBRARY_NAME = os.getenv("GALAXY_LIBRARY_NAME", "FlowGate")
GALAXY_HISTORY_ID = os.getenv("GALAXY_HISTORY_ID", "ba751ee0539fff04")

# Polling
POLL_INTERVAL_SECONDS = float(os.getenv("POLL_INTERVAL_SECONDS", "10"))
POLL_TIMEOUT_SECONDS = float(os.getenv("POLL_TIMEOUT_SECONDS", "3600"))
ENABLE_STATUS_POLLING = os.getenv("ENABLE_STATUS_POLLING", "true").lower() == "true"

# Reversible encryption of stored server passwords (AES-128-CBC).
# Defaults match the key material of previously stored credentials.
CREDENTIALS_KEY = os.getenv("FLOWGATE_CREDENTIALS_KEY", "+MbQeThWmZq4t7w!")
CREDENTIALS_IV = os.getenv("FLOWGATE_CREDENTIALS_IV", "walaz9UaKZJfJw==")

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "localhost")
POSTGRES_PORT = int(os.getenv("POSTGRES_PORT", "5432"))
POSTGRES_DB = os.getenv("POSTGRES_DB", "flowgate")
POSTGRES_USER = os.getenv("POSTGRES_USER", "")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "")
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() == "true"

# API server
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:8080").split(",")
    if origin.strip()
]


# ---------------------------------------------------------
#  CONFIG STRUCTURES
# ---------------------------------------------------------


@dataclass(frozen=True)
class GenePatternConfig:
    api_prefix: str = "/gp/rest/v1"
    timeout: float = HTTP_TIMEOUT


@dataclass(frozen=True)
class GalaxyConfig:
    library_name: str = GALAXY_LIBRARY_NAME
    history_id: str = GALAXY_HISTORY_ID
    timeout: float = HTTP_TIMEOUT


@dataclass(frozen=True)
class PollingConfig:
    interval_seconds: float = POLL_INTERVAL_SECONDS
    timeout_seconds: float = POLL_TIMEOUT_SECONDS
    enabled: bool = ENABLE_STATUS_POLLING


@dataclass(frozen=True)
class CredentialsConfig:
    key: str = CREDENTIALS_KEY
    iv: str = CREDENTIALS_IV


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = DATABASE_URL
    host: str = POSTGRES_HOST
    port: int = POSTGRES_PORT
    db: str = POSTGRES_DB
    user: str = POSTGRES_USER
    password: str = POSTGRES_PASSWORD
    echo: bool = DATABASE_ECHO

    def resolved_url(self) -> str:
        """Full URL if set, Postgres when a user is configured, else local SQLite."""
        if self.url:
            return self.url
        if self.user:
            return (
                f"postgresql://{self.user}:{self.password}"
                f"@{self.host}:{self.port}/{self.db}"
            )
        return "sqlite:///flowgate.db"


@dataclass(frozen=True)
class ServerConfig:
    cors_origins: List[str] = field(default_factory=lambda: list(CORS_ORIGINS))


@dataclass(frozen=True)
class AppConfig:
    genepattern: GenePatternConfig
    galaxy: GalaxyConfig
    polling: PollingConfig
    credentials: CredentialsConfig
    database: DatabaseConfig
    server: ServerConfig


# ---------------------------------------------------------
#  SINGLETON ACCESSOR
# ---------------------------------------------------------

_config_singleton: AppConfig | None = None


def get_config() -> AppConfig:
    global _config_singleton
    if _config_singleton is None:
        _config_singleton = AppConfig(
            genepattern=GenePatternConfig(),
            galaxy=GalaxyConfig(),
            polling=PollingConfig(),
            credentials=CredentialsConfig(),
            database=DatabaseConfig(),
            server=ServerConfig(),
        )
    return _config_singleton
