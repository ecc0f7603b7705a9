from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, StrictBool
from ..middleware.auth import require_admin
from ..services.admin_service import AdminService

router = APIRouter(prefix="/api/admin", tags=["admin"])
admin_service = AdminService()


class ApprovalRequest(BaseModel):
    isApproved: StrictBool


class RoleRequest(BaseModel):
    role: str


@router.get("/users")
async def get_all_users(
    role: Optional[str] = Query(None),
    user: dict = Depends(require_admin),
):
    """All users, optionally restricted to one role"""
    return await admin_service.list_users(role)


@router.put("/users/{user_id}/approve")
async def approve_instructor(
    user_id: str,
    request_data: ApprovalRequest,
    user: dict = Depends(require_admin),
):
    return await admin_service.set_approval(user_id, request_data.isApproved)


@router.put("/users/{user_id}/role")
async def change_user_role(
    user_id: str,
    request_data: RoleRequest,
    user: dict = Depends(require_admin),
):
    return await admin_service.change_role(user_id, request_data.role)


@router.delete("/users/{user_id}")
async def delete_user(user_id: str, user: dict = Depends(require_admin)):
    """Delete a user and everything that belongs to them"""
    return await admin_service.delete_user(user_id)


@router.get("/students/{user_id}/progress")
async def get_student_progress(user_id: str, user: dict = Depends(require_admin)):
    return await admin_service.student_progress(user_id)


@router.get("/statistics")
async def get_platform_statistics(user: dict = Depends(require_admin)):
    return await admin_service.platform_statistics()


@router.get("/notifications")
async def get_pending_instructors(user: dict = Depends(require_admin)):
    """Instructors awaiting approval"""
    return await admin_service.pending_instructors()
