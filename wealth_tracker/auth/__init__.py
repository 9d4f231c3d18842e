"""Authentication helpers.

Auth is a single shared secret (APP_PASSWORD):

- `POST /api/login` accepts the password and hands the same string back as the token.
- Protected endpoints require `Authorization: Bearer <token>` where token == APP_PASSWORD.

There are no users, sessions or expiry. Anyone holding the password has full access.
"""

from .deps import require_token
from .security import login_token, token_matches

__all__ = [
    "require_token",
    "login_token",
    "token_matches",
]
