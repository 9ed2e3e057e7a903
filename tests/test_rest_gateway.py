"""
Unit tests for the Supabase REST gateway.

The HTTP session is mocked; responses are real requests.Response objects.
"""

import json
import pytest
import sys
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import requests

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cryptojournal.core.config import BACKEND_SUPABASE, Config
from cryptojournal.core.errors import (
    PermissionDeniedError,
    RowNotFoundError,
    SetupError,
    StoreError,
)
from cryptojournal.journal.settings import SettingsRepository
from cryptojournal.store import build_gateway
from cryptojournal.store.rest import SupabaseGateway

URL = "https://example.supabase.co"


def make_response(status=200, body=None, raw=None):
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    if raw is not None:
        response._content = raw.encode("utf-8")
    elif body is not None:
        response._content = json.dumps(body).encode("utf-8")
    else:
        response._content = b""
    return response


@pytest.fixture
def session():
    mock = MagicMock()
    mock.headers = {}
    return mock


@pytest.fixture
def gateway(session):
    return SupabaseGateway(URL, "anon-key", access_token="user-jwt", timeout=5, session=session)


class TestRequests:
    """Request shape."""

    def test_auth_headers(self, gateway, session):
        assert session.headers["apikey"] == "anon-key"
        assert session.headers["Authorization"] == "Bearer user-jwt"

    def test_anon_key_used_without_token(self, session):
        SupabaseGateway(URL, "anon-key", session=session)
        assert session.headers["Authorization"] == "Bearer anon-key"

    def test_select_filters_and_order(self, gateway, session):
        session.request.return_value = make_response(body=[])

        gateway.select("trades", {"user_id": "u1"}, order_by="created_at", descending=True)

        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert method == "GET"
        assert url == f"{URL}/rest/v1/trades"
        assert kwargs["params"]["user_id"] == "eq.u1"
        assert kwargs["params"]["order"] == "created_at.desc"
        assert kwargs["timeout"] == 5

    def test_select_one_asks_for_object(self, gateway, session):
        session.request.return_value = make_response(body={"id": "1", "user_id": "u1"})

        row = gateway.select_one("user_settings", {"user_id": "u1"})

        assert row["id"] == "1"
        headers = session.request.call_args.kwargs["headers"]
        assert headers["Accept"] == "application/vnd.pgrst.object+json"

    def test_upsert_merges_on_conflict(self, gateway, session):
        session.request.return_value = make_response(status=201, body=[{"id": "1", "user_id": "u1"}])

        gateway.upsert("user_settings", {"user_id": "u1", "theme": "dark"}, on_conflict="user_id")

        method, _ = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert method == "POST"
        assert kwargs["params"] == {"on_conflict": "user_id"}
        assert "resolution=merge-duplicates" in kwargs["headers"]["Prefer"]
        assert "return=representation" in kwargs["headers"]["Prefer"]
        assert kwargs["json"] == {"user_id": "u1", "theme": "dark"}

    def test_update_by_id(self, gateway, session):
        session.request.return_value = make_response(body=[])

        assert gateway.update("trades", "abc", {"notes": "x"}) is None
        assert session.request.call_args.kwargs["params"] == {"id": "eq.abc"}

    def test_delete_reports_found(self, gateway, session):
        session.request.return_value = make_response(body=[{"id": "abc"}])
        assert gateway.delete("trades", "abc") is True

        session.request.return_value = make_response(body=[])
        assert gateway.delete("trades", "abc") is False


class TestDecimals:
    """JSON numbers parse exactly."""

    def test_numbers_parse_as_decimal(self, gateway, session):
        session.request.return_value = make_response(
            raw='[{"id": "1", "quantity": 0.10000000000000000001, "pnl": 12.5}]'
        )

        row = gateway.select("trades", {})[0]

        assert row["quantity"] == Decimal("0.10000000000000000001")
        assert isinstance(row["pnl"], Decimal)


class TestErrors:
    """Error bodies map to typed errors."""

    @pytest.mark.parametrize("code,status,error_class", [
        ("42P01", 404, SetupError),
        ("PGRST205", 404, SetupError),
        ("42703", 400, SetupError),
        ("42501", 403, PermissionDeniedError),
        ("PGRST116", 406, RowNotFoundError),
        ("23505", 409, StoreError),
    ])
    def test_code_mapping(self, gateway, session, code, status, error_class):
        session.request.return_value = make_response(
            status=status, body={"code": code, "message": "boom", "details": None, "hint": None}
        )

        with pytest.raises(error_class) as exc:
            gateway.select("trades", {})

        assert exc.value.code == code
        assert exc.value.table == "trades"

    def test_unauthorized_without_code(self, gateway, session):
        session.request.return_value = make_response(status=401, raw="Unauthorized")

        with pytest.raises(PermissionDeniedError):
            gateway.select("trades", {})

    def test_relation_message_without_code(self, gateway, session):
        session.request.return_value = make_response(
            status=400, body={"message": 'relation "public.trades" does not exist'}
        )

        with pytest.raises(SetupError):
            gateway.select("trades", {})

    def test_transport_failure(self, gateway, session):
        session.request.side_effect = requests.ConnectionError("down")

        with pytest.raises(StoreError):
            gateway.select("trades", {})

    def test_no_row_becomes_defaults(self, gateway, session):
        session.request.return_value = make_response(
            status=406,
            body={"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"},
        )

        settings = SettingsRepository(gateway).load_user_settings("u1")

        assert settings.starting_capital == 0
        assert settings.theme == "dark"


class TestBuildGateway:
    """Backend selection from configuration."""

    def test_missing_credentials(self):
        config = Config(backend=BACKEND_SUPABASE, supabase_url=None, supabase_anon_key=None)

        with pytest.raises(SetupError) as exc:
            build_gateway(config)

        assert "SUPABASE_URL" in exc.value.message

    def test_unknown_backend(self):
        with pytest.raises(SetupError):
            build_gateway(Config(backend="mongo"))

    def test_supabase_backend(self):
        config = Config(backend=BACKEND_SUPABASE, supabase_url=URL, supabase_anon_key="anon-key")

        assert isinstance(build_gateway(config), SupabaseGateway)
