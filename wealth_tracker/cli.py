"""Command line front end over the API.

Usage:
  python scripts/wealth_cli.py login --password '...'
  python scripts/wealth_cli.py summary --asset-type Stocks
  python scripts/wealth_cli.py add --scheme "Axis Bluechip" --asset-type "Mutual Funds" \
      --type Buy --units 10 --nav 45.5 --amount 455 --date 2024-01-15 --platform Zerodha
  python scripts/wealth_cli.py schemes
  python scripts/wealth_cli.py platforms add Zerodha

The token comes from --token, WEALTH_TOKEN, or `login` (which prints it).
"""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List, Mapping, Optional, Sequence

from wealth_tracker.client import ApiError, PortfolioView, WealthClient
from wealth_tracker.client.summary import Summary, asset_type_initials, share_of_total
from wealth_tracker.config import load_config
from wealth_tracker.models import REFERENCE_KINDS, TRANSACTION_TYPES
from wealth_tracker.util.time import today_iso


def format_money(v: float) -> str:
    return f"{v:,.2f}"


def format_summary(summary: Summary) -> str:
    lines = [f"Total: {format_money(summary.total)}"]
    if summary.transaction_count is not None:
        lines.append(f"Transactions: {summary.transaction_count}")
    for name, amount in summary.by_asset_type.items():
        pct = share_of_total(amount, summary.total)
        lines.append(f"  {name}: {format_money(amount)} ({pct:.1f}% of total)")
    return "\n".join(lines)


def format_transaction(tx: Mapping[str, Any]) -> str:
    tags = " / ".join(str(t) for t in (tx.get("platform"), tx.get("account")) if t)
    out = (
        f"#{tx.get('id')} {tx.get('date')} {tx.get('transaction_type')} "
        f"{tx.get('scheme_name')} [{asset_type_initials(str(tx.get('asset_type') or ''))}] "
        f"units={tx.get('units')} nav={tx.get('nav')} amount={format_money(float(tx.get('amount') or 0))}"
    )
    if tags:
        out += f" ({tags})"
    return out


def _transaction_fields(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "scheme_name": args.scheme,
        "asset_type": args.asset_type,
        "transaction_type": args.type,
        "units": args.units,
        "nav": args.nav,
        "amount": args.amount,
        "date": args.date,
        "platform": args.platform or "",
        "account": args.account or "",
    }


def _add_transaction_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--scheme", required=True)
    p.add_argument("--asset-type", required=True)
    p.add_argument("--type", choices=list(TRANSACTION_TYPES), default="Buy")
    p.add_argument("--units", type=float, required=True)
    p.add_argument("--nav", type=float, required=True)
    p.add_argument("--amount", type=float, required=True)
    p.add_argument("--date", default=today_iso())
    p.add_argument("--platform")
    p.add_argument("--account")


def build_parser() -> argparse.ArgumentParser:
    cfg = load_config()
    ap = argparse.ArgumentParser(prog="wealth_cli")
    ap.add_argument("--url", default=cfg.API_URL)
    ap.add_argument("--token", default=cfg.API_TOKEN)
    sub = ap.add_subparsers(dest="cmd", required=True)

    p = sub.add_parser("login")
    p.add_argument("--password", required=True)

    for name in ("summary", "list"):
        p = sub.add_parser(name)
        p.add_argument("--asset-type", default="")
        p.add_argument("--platform", default="")
        p.add_argument("--account", default="")

    p = sub.add_parser("add")
    _add_transaction_args(p)

    p = sub.add_parser("edit")
    p.add_argument("id", type=int)
    _add_transaction_args(p)

    sub.add_parser("schemes")

    p = sub.add_parser("delete")
    p.add_argument("id", type=int)

    for kind in REFERENCE_KINDS:
        p = sub.add_parser(kind)
        actions = p.add_subparsers(dest="action", required=True)
        actions.add_parser("list")
        a = actions.add_parser("add")
        a.add_argument("name")
        d = actions.add_parser("delete")
        d.add_argument("id", type=int)

    return ap


def run(args: argparse.Namespace, client: WealthClient) -> List[str]:
    """Execute one command and return the lines to print."""
    if args.cmd == "login":
        return [client.login(args.password)]

    if args.cmd == "schemes":
        return client.scheme_names() or ["No schemes."]

    view = PortfolioView(client)

    if args.cmd in ("summary", "list"):
        view.filters.update(asset_type=args.asset_type, platform=args.platform, account=args.account)
        # Fetch directly so a failure reaches the exit code instead of only the log.
        view.transactions = client.list_transactions(
            asset_type=args.asset_type or None,
            platform=args.platform or None,
            account=args.account or None,
        )
        if args.cmd == "summary":
            return [format_summary(view.summary())]
        if not view.transactions:
            return ["No transactions."]
        return [format_transaction(t) for t in view.transactions]

    if args.cmd in ("add", "edit"):
        tx_id = args.id if args.cmd == "edit" else None
        err = view.save_transaction(_transaction_fields(args), tx_id=tx_id)
        if err:
            raise ApiError(err)
        return ["Transaction saved."]

    if args.cmd == "delete":
        err = view.delete_transaction(args.id)
        if err:
            raise ApiError(err)
        return ["Transaction deleted."]

    kind = args.cmd
    if args.action == "list":
        return [f"{r['id']}\t{r['name']}" for r in client.list_names(kind)]
    if args.action == "add":
        row = client.create_name(kind, args.name.strip())
        return [f"Added {row['name']} (id {row['id']})"]
    client.delete_name(kind, args.id)
    return ["Removed."]


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config()
    client = WealthClient(args.url, args.token, timeout=cfg.API_TIMEOUT_SECONDS)
    try:
        for line in run(args, client):
            print(line)
    except ApiError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 1
    return 0
