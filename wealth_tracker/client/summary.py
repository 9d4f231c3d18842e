"""Portfolio summary, computed client-side from the loaded transactions.

The server never aggregates: the summary always reflects exactly the rows the
client currently holds (which may already be filtered by the server).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional


@dataclass
class Summary:
    total: float = 0.0
    by_asset_type: Dict[str, float] = field(default_factory=dict)
    # Only set when the summary is narrowed to one asset type.
    transaction_count: Optional[int] = None


def signed_amount(tx: Mapping[str, Any]) -> float:
    """Sells subtract from the portfolio; Buys and Dividends add."""
    amount = float(tx.get("amount") or 0)
    if tx.get("transaction_type") == "Sell":
        return -amount
    return amount


def calculate_summary(transactions: Iterable[Mapping[str, Any]]) -> Summary:
    s = Summary()
    for tx in transactions:
        value = signed_amount(tx)
        s.total += value
        key = str(tx.get("asset_type"))
        s.by_asset_type[key] = s.by_asset_type.get(key, 0.0) + value
    return s


def display_summary(
    transactions: Iterable[Mapping[str, Any]],
    selected_asset_type: Optional[str] = None,
) -> Summary:
    """Summary to show for the current view.

    With an asset type selected, only that asset type's subtotal is shown, along with
    how many loaded transactions belong to it.
    """
    txs = list(transactions)
    summary = calculate_summary(txs)
    if not selected_asset_type:
        return summary

    amount = summary.by_asset_type.get(selected_asset_type, 0.0)
    count = sum(1 for t in txs if t.get("asset_type") == selected_asset_type)
    return Summary(
        total=amount,
        by_asset_type={selected_asset_type: amount},
        transaction_count=count,
    )


def share_of_total(amount: float, total: float) -> float:
    """Percentage of the total; 0.0 when the total is not positive."""
    if total <= 0:
        return 0.0
    return amount / total * 100.0


def asset_type_initials(name: str) -> str:
    # "Mutual Funds" -> "MF"; single words are kept as-is.
    words = name.split(" ")
    if len(words) == 1:
        return name
    return "".join(w[:1] for w in words).upper()
