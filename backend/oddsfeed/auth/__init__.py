"""Authentication for Odds Feed.

Public API:
    UserStore           - JSON-file user directory with bcrypt hashes
    AuthService         - Login/logout and token verification
    Identity            - Verified caller of a REST route or stream
    create_identity_dependency - FastAPI dependency requiring a bearer token
    create_auth_router  - FastAPI router for /api/auth and /api/admin
"""

from .dependencies import create_identity_dependency
from .routes import create_auth_router
from .service import AuthService, Identity
from .users import UserStore

__all__ = [
    "UserStore",
    "AuthService",
    "Identity",
    "create_identity_dependency",
    "create_auth_router",
]
