from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .api import ApiError, WealthClient
from .summary import Summary, display_summary


def _debug(msg: str) -> None:
    print(f"[client] {msg}")


FILTER_KEYS = ("asset_type", "platform", "account")


@dataclass
class PortfolioView:
    """Client-side view state: loaded lists, active filters and the summary.

    Reference lists and transactions are independent slices. A failed fetch of one
    slice is logged and leaves that slice as it was.
    """

    client: WealthClient
    asset_types: List[Dict[str, Any]] = field(default_factory=list)
    platforms: List[Dict[str, Any]] = field(default_factory=list)
    accounts: List[Dict[str, Any]] = field(default_factory=list)
    transactions: List[Dict[str, Any]] = field(default_factory=list)
    scheme_names: List[str] = field(default_factory=list)
    filters: Dict[str, str] = field(default_factory=lambda: {k: "" for k in FILTER_KEYS})

    # -----------------------------
    # Loading
    # -----------------------------

    def load(self) -> None:
        self.refresh_asset_types()
        self.refresh_transactions()
        self.refresh_filter_options()
        self.refresh_scheme_names()

    def refresh_asset_types(self) -> None:
        try:
            self.asset_types = self.client.list_names("asset-types")
        except ApiError as e:
            _debug(f"Failed to fetch asset types: {e.message}")

    def refresh_filter_options(self) -> None:
        try:
            self.platforms = self.client.list_names("platforms")
        except ApiError as e:
            _debug(f"Failed to fetch platforms: {e.message}")
        try:
            self.accounts = self.client.list_names("accounts")
        except ApiError as e:
            _debug(f"Failed to fetch accounts: {e.message}")

    def refresh_transactions(self) -> None:
        try:
            self.transactions = self.client.list_transactions(
                asset_type=self.filters["asset_type"] or None,
                platform=self.filters["platform"] or None,
                account=self.filters["account"] or None,
            )
        except ApiError as e:
            _debug(f"Failed to fetch transactions: {e.message}")

    def refresh_scheme_names(self) -> None:
        try:
            self.scheme_names = self.client.scheme_names()
        except ApiError as e:
            _debug(f"Failed to fetch scheme names: {e.message}")

    # -----------------------------
    # Filters / summary
    # -----------------------------

    def set_filter(self, key: str, value: Optional[str]) -> None:
        """Change one filter and refetch with all active filters. Empty clears it."""
        if key not in self.filters:
            raise KeyError(key)
        self.filters[key] = value or ""
        self.refresh_transactions()

    @property
    def selected_asset_type(self) -> str:
        return self.filters["asset_type"]

    def summary(self) -> Summary:
        return display_summary(self.transactions, self.selected_asset_type or None)

    # -----------------------------
    # Mutations
    # -----------------------------

    def _after_transaction_change(self) -> None:
        self.refresh_transactions()
        self.refresh_filter_options()
        self.refresh_scheme_names()

    def save_transaction(self, fields: Mapping[str, Any], tx_id: Optional[int] = None) -> Optional[str]:
        """Create (tx_id None) or fully replace a transaction.

        Returns None on success, otherwise the error string to show next to the form.
        """
        try:
            if tx_id is None:
                self.client.create_transaction(fields)
            else:
                self.client.update_transaction(tx_id, fields)
        except ApiError as e:
            return e.message or "Failed to save transaction"
        self._after_transaction_change()
        return None

    def delete_transaction(self, tx_id: int) -> Optional[str]:
        try:
            self.client.delete_transaction(tx_id)
        except ApiError as e:
            _debug(f"Failed to delete transaction: {e.message}")
            return e.message
        self._after_transaction_change()
        return None

    def add_name(self, kind: str, name: str) -> Optional[str]:
        """Add a reference name. Blank names are ignored."""
        name = (name or "").strip()
        if not name:
            return None
        try:
            self.client.create_name(kind, name)
        except ApiError as e:
            _debug(f"Failed to add {kind}: {e.message}")
            return e.message
        self._refresh_kind(kind)
        return None

    def delete_name(self, kind: str, ref_id: int) -> Optional[str]:
        try:
            self.client.delete_name(kind, ref_id)
        except ApiError as e:
            _debug(f"Failed to delete {kind}: {e.message}")
            return e.message
        self._refresh_kind(kind)
        return None

    def _refresh_kind(self, kind: str) -> None:
        if kind == "asset-types":
            self.refresh_asset_types()
        else:
            self.refresh_filter_options()
