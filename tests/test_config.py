"""
Unit tests for configuration, error classification and error reporting.
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import patch

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptojournal.app import describe_error, open_journal
from cryptojournal.core.config import BACKEND_SQLITE, BACKEND_SUPABASE, Config
from cryptojournal.core.errors import (
    PermissionDeniedError,
    RowNotFoundError,
    SetupError,
    StoreError,
    ValidationError,
    classify_error,
)
from cryptojournal.store.sql import SqlGateway


class TestConfig:
    """Environment loading."""

    @patch("cryptojournal.core.config.load_dotenv")
    def test_defaults(self, mock_dotenv, monkeypatch):
        for name in ("JOURNAL_BACKEND", "JOURNAL_USER_ID", "DEFAULT_TIMEFRAME", "CHART_WIDTH", "REQUEST_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

        config = Config.from_env()

        assert config.backend == BACKEND_SQLITE
        assert config.user_id == "local"
        assert config.default_timeframe == "1M"
        assert config.chart_width == 800
        assert config.request_timeout == 10.0

    @patch("cryptojournal.core.config.load_dotenv")
    def test_from_environment(self, mock_dotenv, monkeypatch):
        monkeypatch.setenv("JOURNAL_BACKEND", "Supabase")
        monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key-1234567890")
        monkeypatch.setenv("JOURNAL_USER_ID", "abc")
        monkeypatch.setenv("DEFAULT_TIMEFRAME", "3m")

        config = Config.from_env()

        assert config.backend == BACKEND_SUPABASE
        assert config.user_id == "abc"
        assert config.default_timeframe == "3M"

    def test_summary_masks_secrets(self):
        config = Config(
            backend=BACKEND_SUPABASE,
            supabase_url="https://example.supabase.co",
            supabase_anon_key="anon-key-1234567890",
        )

        summary = config.get_summary()

        assert "anon-key-1234567890" not in summary
        assert "https://example.supabase.co" in summary

    def test_require_supabase(self):
        with pytest.raises(SetupError) as exc:
            Config(backend=BACKEND_SUPABASE, supabase_url="https://x").require_supabase()
        assert "SUPABASE_ANON_KEY" in exc.value.message


class TestClassifyError:
    """Backend codes to error classes."""

    @pytest.mark.parametrize("code,error_class", [
        ("42P01", SetupError),
        ("42703", SetupError),
        ("42501", PermissionDeniedError),
        ("PGRST116", RowNotFoundError),
        ("XX000", StoreError),
        (None, StoreError),
    ])
    def test_codes(self, code, error_class):
        assert isinstance(classify_error(code, "failed"), error_class)

    def test_column_message(self):
        error = classify_error(None, 'column "selected_tags" does not exist')
        assert isinstance(error, SetupError)


class TestDescribeError:
    """User-facing messages."""

    def test_setup_error_includes_table_sql(self):
        title, message = describe_error(SetupError("missing", code="42P01", table="withdrawal_transactions"))

        assert title == "Database setup required"
        assert "CREATE TABLE IF NOT EXISTS withdrawal_transactions" in message

    def test_config_error_has_no_sql(self):
        title, message = describe_error(SetupError("Missing SUPABASE_URL", code="CONFIG", hint="Set it."))

        assert "CREATE TABLE" not in message
        assert "Set it." in message

    def test_permission(self):
        title, _ = describe_error(PermissionDeniedError("denied", code="42501"))
        assert title == "Permission denied"

    def test_validation_names_field(self):
        title, message = describe_error(ValidationError("amount", "Please enter a valid amount"))

        assert title == "Invalid input"
        assert message.startswith("amount:")

    def test_generic(self):
        title, _ = describe_error(StoreError("timeout"))
        assert title == "Store error"


class TestOpenJournal:
    """Wiring."""

    def test_total_profit(self):
        journal = open_journal(Config(user_id="u1"), gateway=SqlGateway.from_path(":memory:"))

        assert journal.owner_id == "u1"
        assert journal.total_profit() == 0
