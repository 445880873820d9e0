"""Application settings: a single Pydantic-based file.

DB selection:
  - DATABASE_URL set and non-empty -> PostgreSQL
  - DATABASE_URL absent/empty -> SQLite (DB_SQLITE_PATH, default data/stakewatch.db)
"""

import re
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from stakewatch.services.constants import ProtocolConstants


def _project_root() -> Path:
    """Project root. config.py lives at the root."""
    return Path(__file__).resolve().parent


def _ensure_env_loaded() -> None:
    """Load .env from project root (then its parent). Idempotent."""
    root: Path = _project_root()
    for candidate in (root / ".env", root.parent / ".env"):
        if candidate.exists():
            load_dotenv(candidate, override=False)


_ensure_env_loaded()


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=(str(_project_root() / ".env"), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str | None = Field(
        default=None,
        description="PostgreSQL DSN; when set, uses Postgres.",
        validation_alias="DATABASE_URL",
    )
    sqlite_path: str | None = Field(default="data/stakewatch.db")
    pool_size: int = Field(default=5)
    pool_timeout: int = Field(default=30)
    pool_recycle: int = Field(default=1800)

    def _use_postgres(self) -> bool:
        return bool((self.database_url or "").strip())

    def _resolved_sqlite_path(self) -> Path:
        raw: str = (self.sqlite_path or "data/stakewatch.db").strip()
        path: Path = Path(raw)
        if not path.is_absolute():
            path = (_project_root() / path).resolve()
        return path

    def _redacted_postgres_dsn(self) -> str:
        url: str = (self.database_url or "").strip()
        return re.sub(r":([^:@]+)@", r":***@", url) if url else ""

    @property
    def url(self) -> str:
        if self._use_postgres():
            return (self.database_url or "").strip()
        path = self._resolved_sqlite_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{path.as_posix()}"

    def db_info_for_logging(self) -> str:
        if self._use_postgres():
            return f"PostgreSQL @ {self._redacted_postgres_dsn()}"
        return f"SQLite @ {self._resolved_sqlite_path().as_posix()}"


class ProtocolSettings(BaseSettings):
    """Protocol constants. Read once and handed to the services as ProtocolConstants."""

    model_config = SettingsConfigDict(
        env_prefix="PROTOCOL_",
        env_file=(str(_project_root() / ".env"), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    genesis_timestamp: int = Field(default=1608163200, description="Day-bucket origin (unix seconds)")
    seconds_per_day: int = Field(default=86400)
    token_decimals: int = Field(default=18)
    cut_divider: int = Field(default=1_000_000, description="Fee cuts are expressed in millionths")
    delegation_ratio: int = Field(default=16, description="Delegation capacity multiplier")
    decimal_precision: int = Field(default=78, description="Significant digits for ledger arithmetic")

    def constants(self) -> ProtocolConstants:
        return ProtocolConstants(
            genesis_timestamp=self.genesis_timestamp,
            seconds_per_day=self.seconds_per_day,
            token_decimals=self.token_decimals,
            cut_divider=self.cut_divider,
            delegation_ratio=self.delegation_ratio,
            decimal_precision=self.decimal_precision,
        )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STAKEWATCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    api_key: str | None = Field(default=None, description="API key for the DB health endpoint")
    data_dir: Path = Field(default=Path("data"))
    badges_enabled: bool = Field(default=True, description="Award badges while dispatching events")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    protocol: ProtocolSettings = Field(default_factory=ProtocolSettings)

    def model_post_init(self, _context: object) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    return Settings()
