"""
Supabase gateway.

Talks to the hosted PostgREST API with requests. Row-level security on
the server scopes every call to the signed-in user; error responses keep
their Postgres/PostgREST code so callers can tell failures apart.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from cryptojournal.core.errors import GatewayError, SetupError, StoreError, classify_error
from cryptojournal.store.base import Gateway, Row

logger = logging.getLogger(__name__)

SINGLE_OBJECT = "application/vnd.pgrst.object+json"
RETURN_ROWS = "return=representation"
MERGE_DUPLICATES = "resolution=merge-duplicates"


def _encode(value: Any) -> str:
    """PostgREST filter literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class SupabaseGateway(Gateway):
    """
    Gateway over the Supabase REST endpoint.

    No retries: a failed call raises and the user decides what to do.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        if not url or not api_key:
            raise SetupError(
                "Supabase URL and anon key are required",
                code="CONFIG",
                hint="Set SUPABASE_URL and SUPABASE_ANON_KEY.",
            )

        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
            "Content-Type": "application/json",
        })

    def _error(self, response: requests.Response, table: str) -> GatewayError:
        """Build a GatewayError from a PostgREST error body."""
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        code = body.get("code")
        if code is None and response.status_code in (401, 403):
            code = "42501"
        message = body.get("message") or response.reason or f"HTTP {response.status_code}"

        return classify_error(
            code,
            message,
            details=body.get("details"),
            hint=body.get("hint"),
            table=table,
        )

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Row] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self.base_url}/{table}"
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{method} {table} failed: {e}")
            raise StoreError(f"Request to {table} failed: {e}", table=table) from e

        if not response.ok:
            error = self._error(response, table)
            logger.error(f"{method} {table} returned {response.status_code}: {error}")
            raise error

        if not response.content:
            return None
        return response.json(parse_float=Decimal)

    def select(
        self,
        table: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        params = {"select": "*"}
        params.update({name: f"eq.{_encode(value)}" for name, value in filters.items()})
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"

        return self._request("GET", table, params=params) or []

    def select_one(self, table: str, filters: Dict[str, Any]) -> Row:
        params = {"select": "*"}
        params.update({name: f"eq.{_encode(value)}" for name, value in filters.items()})

        return self._request("GET", table, params=params, headers={"Accept": SINGLE_OBJECT})

    def insert(self, table: str, row: Row) -> Row:
        rows = self._request("POST", table, payload=row, headers={"Prefer": RETURN_ROWS})
        if not rows:
            raise StoreError("Insert returned no row", table=table)
        return rows[0]

    def update(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        rows = self._request(
            "PATCH",
            table,
            params={"id": f"eq.{row_id}"},
            payload=changes,
            headers={"Prefer": RETURN_ROWS},
        )
        return rows[0] if rows else None

    def delete(self, table: str, row_id: str) -> bool:
        rows = self._request(
            "DELETE",
            table,
            params={"id": f"eq.{row_id}"},
            headers={"Prefer": RETURN_ROWS},
        )
        return bool(rows)

    def upsert(self, table: str, row: Row, on_conflict: str) -> Row:
        rows = self._request(
            "POST",
            table,
            params={"on_conflict": on_conflict},
            payload=row,
            headers={"Prefer": f"{MERGE_DUPLICATES},{RETURN_ROWS}"},
        )
        if not rows:
            raise StoreError("Upsert returned no row", table=table)
        return rows[0]

    def ping(self, table: str) -> None:
        self._request("GET", table, params={"select": "id", "limit": "1"})
