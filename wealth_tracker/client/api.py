from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import requests


def _debug(msg: str) -> None:
    print(f"[client] {msg}")


class ApiError(Exception):
    """A request failed.

    `message` is the server's error string when the server answered, or
    "Network error: ..." when the request never completed (status_code is None).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(r: Any) -> str:
    try:
        data = r.json()
    except Exception:
        data = None
    if isinstance(data, dict):
        detail = data.get("detail") or data.get("error")
        if isinstance(detail, str) and detail:
            return detail
        if detail:
            # FastAPI validation errors are a list of dicts.
            return str(detail)
    return f"HTTP {r.status_code}"


class WealthClient:
    """Thin client for the Wealth Tracker API.

    `session` defaults to a `requests.Session`; anything with a compatible
    `request(method, url, params=, json=, headers=, timeout=)` works.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        timeout: float = 30.0,
        session: Any = None,
    ):
        self.base_url = (base_url or "").rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        auth: bool = True,
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            r = self.session.request(
                method,
                url,
                params=dict(params) if params else None,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiError(f"Network error: {e}") from e
        if r.status_code < 200 or r.status_code >= 300:
            raise ApiError(_error_message(r), status_code=r.status_code)
        return r.json() if r.content else None

    # -----------------------------
    # Auth / health
    # -----------------------------

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health", auth=False)

    def login(self, password: str) -> str:
        """Exchange the password for a token and remember it."""
        data = self._request("POST", "/api/login", json={"password": password}, auth=False)
        self.token = str(data["token"])
        return self.token

    # -----------------------------
    # Reference lists
    # -----------------------------

    def list_names(self, kind: str) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/{kind}")

    def create_name(self, kind: str, name: str) -> Dict[str, Any]:
        return self._request("POST", f"/api/{kind}", json={"name": name})

    def delete_name(self, kind: str, ref_id: int) -> None:
        self._request("DELETE", f"/api/{kind}/{ref_id}")

    # -----------------------------
    # Transactions
    # -----------------------------

    def list_transactions(
        self,
        asset_type: Optional[str] = None,
        platform: Optional[str] = None,
        account: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {}
        if asset_type:
            params["assetType"] = asset_type
        if platform:
            params["platform"] = platform
        if account:
            params["account"] = account
        return self._request("GET", "/api/transactions", params=params)

    def get_transaction(self, tx_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/transactions/{tx_id}")

    def create_transaction(self, fields: Mapping[str, Any]) -> int:
        data = self._request("POST", "/api/transactions", json=dict(fields))
        return int(data["id"])

    def update_transaction(self, tx_id: int, fields: Mapping[str, Any]) -> None:
        self._request("PUT", f"/api/transactions/{tx_id}", json=dict(fields))

    def delete_transaction(self, tx_id: int) -> None:
        self._request("DELETE", f"/api/transactions/{tx_id}")

    def scheme_names(self) -> List[str]:
        return self._request("GET", "/api/scheme-names")
