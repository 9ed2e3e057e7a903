"""
Configuration management for CryptoJournal.

Loads settings from environment variables (and a .env file, if present).
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from cryptojournal.core.errors import SetupError

BACKEND_SQLITE = "sqlite"
BACKEND_SUPABASE = "supabase"


@dataclass
class Config:
    """Application configuration."""

    # Storage backend: "sqlite" (local file) or "supabase" (hosted)
    backend: str = BACKEND_SQLITE

    # Local database
    database_path: str = "data/cryptojournal.db"

    # Supabase
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    supabase_access_token: Optional[str] = None
    request_timeout: float = 10.0

    # Owner of every record read or written
    user_id: Optional[str] = "local"

    # Chart canvas
    chart_width: int = 800
    chart_height: int = 400

    # Analytics window used when none is given
    default_timeframe: str = "1M"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        load_dotenv()

        return cls(
            backend=os.getenv("JOURNAL_BACKEND", BACKEND_SQLITE).lower(),
            database_path=os.getenv("JOURNAL_DB_PATH", "data/cryptojournal.db"),
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY"),
            supabase_access_token=os.getenv("SUPABASE_ACCESS_TOKEN"),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),
            user_id=os.getenv("JOURNAL_USER_ID", "local") or None,
            chart_width=int(os.getenv("CHART_WIDTH", "800")),
            chart_height=int(os.getenv("CHART_HEIGHT", "400")),
            default_timeframe=os.getenv("DEFAULT_TIMEFRAME", "1M").upper(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def require_supabase(self) -> None:
        """
        Ensure hosted-backend credentials are present.

        Raises SetupError naming the missing variable.
        """
        missing = [
            name
            for name, value in (
                ("SUPABASE_URL", self.supabase_url),
                ("SUPABASE_ANON_KEY", self.supabase_anon_key),
            )
            if not value
        ]
        if missing:
            raise SetupError(
                f"Missing environment variables: {', '.join(missing)}",
                code="CONFIG",
                hint="Set them in .env or switch JOURNAL_BACKEND to sqlite.",
            )

    def get_summary(self) -> str:
        """Get a summary of the active configuration, secrets masked."""

        def _mask(value: Optional[str]) -> str:
            if not value:
                return "Not set"
            return f"{value[:4]}…{value[-4:]}" if len(value) > 12 else "Set"

        if self.backend == BACKEND_SUPABASE:
            storage = f"""  URL: {self.supabase_url or 'Not set'}
  Anon key: {_mask(self.supabase_anon_key)}
  Access token: {_mask(self.supabase_access_token)}
  Timeout: {self.request_timeout:.0f}s"""
        else:
            storage = f"  Database: {self.database_path}"

        return f"""Backend: {self.backend}
{storage}

User: {self.user_id or 'Not signed in'}
Default timeframe: {self.default_timeframe}
Chart: {self.chart_width}x{self.chart_height}
Log level: {self.log_level}
"""
