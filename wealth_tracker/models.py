from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


# URL segment -> table. The three reference lists share one shape: {id, name}.
REFERENCE_KINDS = {
    "asset-types": "asset_types",
    "platforms": "platforms",
    "accounts": "accounts",
}

TRANSACTION_TYPES = ("Buy", "Sell", "Dividend")

# Columns a client supplies; id and created_at are owned by the server.
TRANSACTION_FIELDS = (
    "scheme_name",
    "asset_type",
    "transaction_type",
    "units",
    "nav",
    "amount",
    "date",
    "platform",
    "account",
)


@dataclass(frozen=True)
class TransactionFilters:
    """Exact-match filters for the transaction list. Empty values are ignored."""

    asset_type: Optional[str] = None
    platform: Optional[str] = None
    account: Optional[str] = None

    def active(self) -> list[tuple[str, str]]:
        pairs = [
            ("asset_type", self.asset_type),
            ("platform", self.platform),
            ("account", self.account),
        ]
        return [(col, v) for col, v in pairs if v]
