"""Login/logout and admin user-management endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from ..errors import ApiError
from .dependencies import create_identity_dependency
from .service import AuthService, Identity

logger = logging.getLogger(__name__)


class Credentials(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


def create_auth_router(auth: AuthService) -> APIRouter:
    """Create the /api/auth and /api/admin routers bound to an AuthService."""
    router = APIRouter(prefix="/api", tags=["auth"])
    require_identity = create_identity_dependency(auth)

    def require_admin(identity: Identity = Depends(require_identity)) -> Identity:
        if not identity.is_admin:
            raise ApiError(403, "Admin access required")
        return identity

    @router.post("/auth/login")
    async def login(body: Credentials, request: Request) -> dict:
        token, user = await auth.login(
            body.username,
            body.password,
            user_agent=request.headers.get("user-agent", "Unknown"),
            ip_address=request.client.host if request.client else None,
        )
        return {"success": True, "token": token, "user": {"id": user.id, "username": user.username}}

    @router.post("/auth/logout")
    async def logout(identity: Identity = Depends(require_identity)) -> dict:
        await auth.logout(identity)
        return {"success": True, "message": "Logged out successfully"}

    @router.get("/admin/users")
    async def list_users(_: Identity = Depends(require_admin)) -> dict:
        return {"success": True, "users": [u.to_public_dict() for u in auth.users.users()]}

    @router.post("/admin/users")
    async def add_user(body: Credentials, admin: Identity = Depends(require_admin)) -> dict:
        try:
            user = await auth.users.add(body.username, body.password)
        except ValueError:
            raise ApiError(400, "Username already exists") from None
        logger.info("Admin %s created user %s", admin.username, user.username)
        return {"success": True, "user": user.to_public_dict()}

    @router.delete("/admin/users/{user_id}")
    async def delete_user(user_id: int, admin: Identity = Depends(require_admin)) -> dict:
        if not await auth.users.delete(user_id):
            raise ApiError(404, "User not found")
        logger.info("Admin %s deleted user %d", admin.username, user_id)
        return {"success": True, "message": "User deleted successfully"}

    return router
