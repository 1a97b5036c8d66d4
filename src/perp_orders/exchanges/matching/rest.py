# src/perp_orders/exchanges/matching/rest.py
from __future__ import annotations

import logging
from typing import Any

import requests

from perp_orders.core.errors import ProtocolError, TimedOutError, TransportError
from perp_orders.core.models.order import SignedOrderRequest

BASE_URL = "http://localhost:3001"

ORDERS_PATH = "/api/orders"

log = logging.getLogger(__name__)


def _error_detail(r: requests.Response) -> str:
    """
    Server error text for display: {"error"|"message"|"detail": ...} if JSON,
    raw text otherwise.
    """
    text = (r.text or "").strip()
    try:
        payload = r.json()
    except ValueError:
        return text[:500]

    if isinstance(payload, dict):
        for key in ("error", "message", "detail", "msg"):
            v = payload.get(key)
            if isinstance(v, str) and v:
                return v
    return text[:500]


class OrderServiceREST:
    """
    Matching-service REST client (blocking).

    No retries: a failed POST is surfaced to the caller, a new attempt must
    rebuild and re-sign the order.
    """

    def __init__(
        self,
        *,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = float(timeout)

        self.sess = session or requests.Session()
        self.sess.headers.update({"Content-Type": "application/json", "Accept": "application/json"})

    # ---------------------------------------------------------------------
    # CORE REQUEST
    # ---------------------------------------------------------------------

    def _request(self, method: str, path: str, *, json_body: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"

        try:
            r = self.sess.request(
                method=method,
                url=url,
                json=json_body,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            log.warning("[REST] timeout (%s %s) after %.1fs", method, path, self.timeout)
            raise TimedOutError(f"{method} {path} timed out") from e
        except requests.RequestException as e:
            log.warning("[REST] request error (%s %s) | %r", method, path, e)
            raise TransportError(f"{method} {path} failed: {e}") from e

        # --- ERRORS ---
        if not 200 <= r.status_code < 300:
            detail = _error_detail(r)
            log.warning("[REST] HTTP %d %s %s: %s", r.status_code, method, path, detail)
            raise TransportError(
                f"Server responded with status {r.status_code}: {detail}",
                status_code=r.status_code,
                detail=detail or None,
            )

        # --- OK: body must be JSON ---
        if not (r.text or "").strip():
            raise ProtocolError(f"Empty response from server ({method} {path})")
        try:
            return r.json()
        except ValueError as e:
            raise ProtocolError(f"Invalid JSON response: {r.text[:100]}") from e

    # ---------------------------------------------------------------------
    # API METHODS
    # ---------------------------------------------------------------------

    def place_order(self, request: SignedOrderRequest) -> dict:
        payload = self._request("POST", ORDERS_PATH, json_body=request.to_payload())
        if not isinstance(payload, dict):
            raise ProtocolError("order response must be a JSON object")
        return payload

    def list_orders(self) -> dict:
        # no server-side filtering / pagination: owner filter is client-side
        payload = self._request("GET", ORDERS_PATH)
        if not isinstance(payload, dict):
            raise ProtocolError("orders response must be a JSON object")
        return payload

    def close(self) -> None:
        self.sess.close()
