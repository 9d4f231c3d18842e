from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from wealth_tracker import __version__
from wealth_tracker.auth import login_token, require_token
from wealth_tracker.config import Config, load_config
from wealth_tracker.models import REFERENCE_KINDS, TransactionFilters
from wealth_tracker.store import (
    DuplicateNameError,
    PortfolioStore,
    StorageError,
    missing_transaction_fields,
)


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


def get_store(request: Request) -> PortfolioStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=500, detail="server_store_missing")
    return store


# Every route on this router requires the bearer token.
protected = APIRouter(prefix="/api", dependencies=[Depends(require_token)])
public = APIRouter(prefix="/api")


# -----------------------------
# Health
# -----------------------------


@public.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok"}


# -----------------------------
# Auth
# -----------------------------


class LoginRequest(BaseModel):
    password: Optional[str] = None


@public.post("/login")
def login(payload: LoginRequest, request: Request) -> Dict[str, Any]:
    cfg: Config = request.app.state.cfg
    token = login_token(payload.password, cfg.APP_PASSWORD)
    if token is None:
        raise HTTPException(status_code=401, detail="Invalid password")
    return {"success": True, "token": token}


# -----------------------------
# Reference lists (asset types, platforms, accounts)
# -----------------------------
# Path ids are taken as strings; the store treats a malformed or out-of-range id as absent.


class NameRequest(BaseModel):
    name: Optional[str] = None


def _add_reference_routes(router: APIRouter, kind: str) -> None:
    """Register list/create/delete for one reference list under /api/<kind>."""

    def list_rows(store: PortfolioStore = Depends(get_store)) -> List[Dict[str, Any]]:
        return store.list_names(kind)

    def create_row(payload: NameRequest, store: PortfolioStore = Depends(get_store)) -> Dict[str, Any]:
        name = payload.name
        if not name or not name.strip():
            raise HTTPException(status_code=400, detail="Name is required")
        try:
            return store.create_name(kind, name)
        except DuplicateNameError as e:
            raise HTTPException(status_code=409, detail=str(e))

    def delete_row(ref_id: str, store: PortfolioStore = Depends(get_store)) -> Dict[str, Any]:
        store.delete_name(kind, ref_id)
        return {"success": True}

    slug = kind.replace("-", "_")
    router.add_api_route(f"/{kind}", list_rows, methods=["GET"], name=f"list_{slug}")
    router.add_api_route(f"/{kind}", create_row, methods=["POST"], name=f"create_{slug}")
    router.add_api_route(f"/{kind}/{{ref_id}}", delete_row, methods=["DELETE"], name=f"delete_{slug}")


for _kind in REFERENCE_KINDS:
    _add_reference_routes(protected, _kind)


# -----------------------------
# Transactions
# -----------------------------


class TransactionRequest(BaseModel):
    """Client-owned transaction fields.

    Everything is optional at the schema level. Create checks presence itself so
    that units/nav/amount of 0 are accepted while a missing value is rejected.
    """

    scheme_name: Optional[str] = None
    asset_type: Optional[str] = None
    transaction_type: Optional[str] = None
    units: Optional[float] = None
    nav: Optional[float] = None
    amount: Optional[float] = None
    date: Optional[str] = None
    platform: Optional[str] = None
    account: Optional[str] = None


@protected.get("/transactions")
def list_transactions(
    asset_type: Optional[str] = Query(None, alias="assetType"),
    platform: Optional[str] = None,
    account: Optional[str] = None,
    store: PortfolioStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    """List transactions, newest first. Filters are exact matches combined with AND."""
    filters = TransactionFilters(asset_type=asset_type, platform=platform, account=account)
    return store.list_transactions(filters)


@protected.get("/transactions/{tx_id}")
def get_transaction(tx_id: str, store: PortfolioStore = Depends(get_store)) -> Dict[str, Any]:
    row = store.get_transaction(tx_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return row


@protected.post("/transactions")
def create_transaction(payload: TransactionRequest, store: PortfolioStore = Depends(get_store)) -> Dict[str, Any]:
    fields = payload.model_dump()
    if missing_transaction_fields(fields):
        raise HTTPException(status_code=400, detail="Missing required fields")
    new_id = store.create_transaction(fields)
    return {"id": new_id, "message": "Transaction created"}


@protected.put("/transactions/{tx_id}")
def update_transaction(
    tx_id: str,
    payload: TransactionRequest,
    store: PortfolioStore = Depends(get_store),
) -> Dict[str, Any]:
    # Full overwrite. No presence check here: omitted NOT NULL fields fail in storage.
    if not store.update_transaction(tx_id, payload.model_dump()):
        raise HTTPException(status_code=404, detail="Transaction not found")
    return {"message": "Transaction updated"}


@protected.delete("/transactions/{tx_id}")
def delete_transaction(tx_id: str, store: PortfolioStore = Depends(get_store)) -> Dict[str, Any]:
    if not store.delete_transaction(tx_id):
        raise HTTPException(status_code=404, detail="Transaction not found")
    return {"message": "Transaction deleted"}


@protected.get("/scheme-names")
def scheme_names(store: PortfolioStore = Depends(get_store)) -> List[str]:
    """Distinct scheme names, for autocompletion in the client."""
    return store.scheme_names()


# -----------------------------
# App
# -----------------------------


def _storage_error_response(request: Request, exc: StorageError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def create_app(cfg: Optional[Config] = None, store: Optional[PortfolioStore] = None) -> FastAPI:
    cfg = cfg or load_config()
    store = store or PortfolioStore(cfg.DB_DSN, seed_asset_types=cfg.SEED_ASSET_TYPES)

    app = FastAPI(title="Wealth Tracker", version=__version__)
    app.state.cfg = cfg
    app.state.store = store

    cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if cfg.LOG_REQUESTS:

        @app.middleware("http")
        async def _log_requests(request: Request, call_next):
            t0 = time.perf_counter()
            response = await call_next(request)
            ms = (time.perf_counter() - t0) * 1000
            _debug(f"{request.method} {request.url.path} -> {response.status_code} ({ms:.1f}ms)")
            return response

    app.add_exception_handler(StorageError, _storage_error_response)

    @app.on_event("startup")
    def _on_startup() -> None:
        # Ensure schema exists (idempotent).
        store.init()
        if cfg.uses_insecure_password:
            _debug("WARNING: APP_PASSWORD is not set; using the insecure built-in default")

    app.include_router(public)
    app.include_router(protected)
    return app


app = create_app()
