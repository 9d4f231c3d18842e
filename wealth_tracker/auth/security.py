from __future__ import annotations

from typing import Optional


def token_matches(token: Optional[str], secret: str) -> bool:
    """Plain string equality against the configured secret.

    Not constant-time. Blank tokens never match.
    """
    if not token or not secret:
        return False
    return token == secret


def login_token(password: Optional[str], secret: str) -> Optional[str]:
    """Return the bearer token for a correct password, else None.

    The token is the password itself.
    """
    if not token_matches(password, secret):
        return None
    return secret
