"""
Persistence gateways.

build_gateway() is called once at startup; the result is passed to
every repository.
"""

import logging

from cryptojournal.core.config import BACKEND_SQLITE, BACKEND_SUPABASE, Config
from cryptojournal.core.errors import SetupError
from cryptojournal.store.base import ALL_TABLES, Gateway
from cryptojournal.store.rest import SupabaseGateway
from cryptojournal.store.sql import SqlGateway

logger = logging.getLogger(__name__)


def build_gateway(config: Config) -> Gateway:
    """Construct the configured gateway."""
    if config.backend == BACKEND_SUPABASE:
        config.require_supabase()
        logger.info(f"Using Supabase backend at {config.supabase_url}")
        return SupabaseGateway(
            config.supabase_url,
            config.supabase_anon_key,
            access_token=config.supabase_access_token,
            timeout=config.request_timeout,
        )

    if config.backend == BACKEND_SQLITE:
        logger.info(f"Using SQLite backend at {config.database_path}")
        return SqlGateway.from_path(config.database_path)

    raise SetupError(
        f"Unknown backend: {config.backend}",
        code="CONFIG",
        hint=f"JOURNAL_BACKEND must be {BACKEND_SQLITE} or {BACKEND_SUPABASE}.",
    )


__all__ = ["ALL_TABLES", "Gateway", "SqlGateway", "SupabaseGateway", "build_gateway"]
