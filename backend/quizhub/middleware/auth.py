from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from ..models.user import UserModel, ROLE_ADMIN, ROLE_INSTRUCTOR, ROLE_STUDENT
from ..utils.errors import Forbidden, Unauthorized
from ..utils.jwt_utils import decode_access_token


bearer_scheme = HTTPBearer(auto_error=False)


# Dependency function for FastAPI
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    """Resolve the bearer token to ``{"id", "email", "role"}``.

    The token must be valid and its subject must still exist.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authorized to access this route")

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise Unauthorized("Not authorized to access this route")

    user = await UserModel.find_by_id(payload["sub"])
    if not user:
        raise Unauthorized("No user found with this ID")

    return {"id": user["id"], "email": user["email"], "role": user["role"]}


def require_role(role: str):
    async def dependency(user: dict = Depends(get_current_user)) -> dict:
        if user.get("role") != role:
            raise Forbidden(f"User role {user.get('role')} is not authorized to access this route")
        return user
    return dependency


require_student = require_role(ROLE_STUDENT)
require_instructor = require_role(ROLE_INSTRUCTOR)
require_admin = require_role(ROLE_ADMIN)
