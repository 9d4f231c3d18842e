"""Tests for WealthClient and PortfolioView, run against the real app."""

from __future__ import annotations

import pytest
import requests

from wealth_tracker.client import ApiError, PortfolioView, WealthClient


@pytest.fixture
def client(api, cfg) -> WealthClient:
    return WealthClient("http://testserver", cfg.APP_PASSWORD, session=api)


@pytest.fixture
def view(client) -> PortfolioView:
    v = PortfolioView(client)
    v.load()
    return v


class _BrokenSession:
    def request(self, *args, **kwargs):
        raise requests.ConnectionError("connection refused")


class TestWealthClient:
    def test_health_without_token(self, api):
        c = WealthClient("http://testserver", session=api)
        assert c.health() == {"status": "ok"}

    def test_login_stores_token(self, api, cfg):
        c = WealthClient("http://testserver", session=api)
        assert c.login(cfg.APP_PASSWORD) == cfg.APP_PASSWORD
        assert c.token == cfg.APP_PASSWORD
        assert len(c.list_names("asset-types")) == 3

    def test_login_failure_carries_server_message(self, api):
        c = WealthClient("http://testserver", session=api)
        with pytest.raises(ApiError) as exc:
            c.login("nope")
        assert exc.value.status_code == 401
        assert exc.value.message == "Invalid password"

    def test_missing_token(self, api):
        c = WealthClient("http://testserver", session=api)
        with pytest.raises(ApiError) as exc:
            c.list_transactions()
        assert exc.value.status_code == 401

    def test_network_error(self):
        c = WealthClient("http://nowhere", "t", session=_BrokenSession())
        with pytest.raises(ApiError) as exc:
            c.list_transactions()
        assert exc.value.status_code is None
        assert exc.value.message.startswith("Network error: ")

    def test_transaction_round_trip(self, client, sample_tx):
        tx_id = client.create_transaction(sample_tx)
        row = client.get_transaction(tx_id)
        assert row["scheme_name"] == sample_tx["scheme_name"]
        client.update_transaction(tx_id, {**sample_tx, "amount": 1.0})
        assert client.get_transaction(tx_id)["amount"] == 1.0
        client.delete_transaction(tx_id)
        with pytest.raises(ApiError) as exc:
            client.get_transaction(tx_id)
        assert exc.value.status_code == 404

    def test_filters_become_query_params(self, client, sample_tx):
        client.create_transaction({**sample_tx, "asset_type": "Stocks"})
        client.create_transaction({**sample_tx, "asset_type": "Mutual Funds"})
        rows = client.list_transactions(asset_type="Stocks")
        assert [r["asset_type"] for r in rows] == ["Stocks"]
        assert len(client.list_transactions(asset_type="")) == 2


class TestPortfolioView:
    def test_load_fills_every_slice(self, view):
        assert [r["name"] for r in view.asset_types] == ["Fixed Deposits", "Mutual Funds", "Stocks"]
        assert view.platforms == []
        assert view.accounts == []
        assert view.transactions == []

    def test_save_refreshes_transactions_and_filter_options(self, view, client, sample_tx):
        assert view.save_transaction(sample_tx) is None
        assert len(view.transactions) == 1

        # Platforms created elsewhere show up after the next mutation.
        client.create_name("platforms", "Kuvera")
        assert view.save_transaction({**sample_tx, "scheme_name": "Second"}) is None
        assert [p["name"] for p in view.platforms] == ["Kuvera"]
        assert view.transactions[0]["scheme_name"] == "Second"

    def test_save_error_is_returned(self, view, sample_tx):
        del sample_tx["nav"]
        assert view.save_transaction(sample_tx) == "Missing required fields"
        assert view.transactions == []

    def test_update_missing_returns_not_found(self, view, sample_tx):
        assert view.save_transaction(sample_tx, tx_id=999) == "Transaction not found"

    def test_edit_existing(self, view, sample_tx):
        view.save_transaction(sample_tx)
        tx_id = view.transactions[0]["id"]
        assert view.save_transaction({**sample_tx, "transaction_type": "Sell"}, tx_id=tx_id) is None
        assert view.transactions[0]["transaction_type"] == "Sell"

    def test_filter_change_refetches_with_all_filters(self, view, sample_tx):
        view.save_transaction({**sample_tx, "asset_type": "Stocks", "platform": "Zerodha"})
        view.save_transaction({**sample_tx, "asset_type": "Stocks", "platform": "Groww"})
        view.save_transaction({**sample_tx, "asset_type": "Mutual Funds", "platform": "Zerodha"})

        view.set_filter("asset_type", "Stocks")
        assert len(view.transactions) == 2
        view.set_filter("platform", "Zerodha")
        assert len(view.transactions) == 1
        view.set_filter("asset_type", "")
        assert len(view.transactions) == 2

    def test_unknown_filter_key(self, view):
        with pytest.raises(KeyError):
            view.set_filter("scheme", "x")

    def test_summary_follows_selected_asset_type(self, view, sample_tx):
        view.save_transaction({**sample_tx, "asset_type": "Stocks", "amount": 100})
        view.save_transaction({**sample_tx, "asset_type": "Stocks", "transaction_type": "Sell", "amount": 40})
        view.save_transaction({**sample_tx, "asset_type": "Mutual Funds", "amount": 10})
        assert view.summary().total == 70

        view.set_filter("asset_type", "Stocks")
        s = view.summary()
        assert s.total == 60
        assert s.transaction_count == 2

    def test_delete_transaction(self, view, sample_tx):
        view.save_transaction(sample_tx)
        tx_id = view.transactions[0]["id"]
        assert view.delete_transaction(tx_id) is None
        assert view.transactions == []
        assert view.delete_transaction(tx_id) == "Transaction not found"

    def test_add_and_delete_names(self, view):
        assert view.add_name("asset-types", "  Bonds  ") is None
        assert "Bonds" in [r["name"] for r in view.asset_types]
        assert view.add_name("accounts", "Solo") is None
        assert [r["name"] for r in view.accounts] == ["Solo"]

        bonds = next(r for r in view.asset_types if r["name"] == "Bonds")
        assert view.delete_name("asset-types", bonds["id"]) is None
        assert "Bonds" not in [r["name"] for r in view.asset_types]

    def test_blank_name_is_ignored(self, view):
        assert view.add_name("platforms", "   ") is None
        assert view.platforms == []

    def test_duplicate_name_reports_error(self, view):
        view.add_name("platforms", "Groww")
        err = view.add_name("platforms", "Groww")
        assert err is not None and "UNIQUE" in err

    def test_save_refreshes_scheme_names(self, view, sample_tx):
        assert view.scheme_names == []
        view.save_transaction(sample_tx)
        assert view.scheme_names == [sample_tx["scheme_name"]]
        view.delete_transaction(view.transactions[0]["id"])
        assert view.scheme_names == []

    def test_load_fetches_scheme_names(self, client, sample_tx):
        client.create_transaction(sample_tx)
        v = PortfolioView(client)
        v.load()
        assert v.scheme_names == [sample_tx["scheme_name"]]

    def test_failed_fetch_keeps_previous_slice(self, view, client, capsys):
        before = list(view.asset_types)
        client.token = "wrong"
        view.refresh_asset_types()
        assert view.asset_types == before
        assert "Failed to fetch asset types: Unauthorized" in capsys.readouterr().out
