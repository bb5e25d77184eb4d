"""Authentication / authorization.

Kept deliberately small:

- `users` table (email + password hash + role)
- stateless JWT bearer tokens carrying (user id, role)
- a static role -> operation table checked before each protected handler
"""

from .deps import get_principal, require
from .service import bootstrap_admin_if_needed, create_account

__all__ = [
    "get_principal",
    "require",
    "bootstrap_admin_if_needed",
    "create_account",
]
