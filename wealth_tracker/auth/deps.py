from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .security import token_matches


_bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def require_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> str:
    """Authenticate a request against the shared secret.

    Only `Authorization: Bearer <token>` is accepted. Returns the token.
    """

    cfg = getattr(request.app.state, "cfg", None)
    if cfg is None:
        raise HTTPException(status_code=500, detail="server_config_missing")

    token = credentials.credentials if credentials is not None else None
    if not token_matches(token, cfg.APP_PASSWORD):
        # Keep a single detail string so clients can handle it consistently.
        raise _unauthorized("Unauthorized")
    return token
