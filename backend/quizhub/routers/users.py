from fastapi import APIRouter, Depends
from ..middleware.auth import get_current_user
from ..models.profile import Profile, ProfileModel


router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile")
async def get_profile(user: dict = Depends(get_current_user)):
    """Current user with their profile (null until one is saved)"""
    profile = await ProfileModel.find_by_user(user["id"])
    return {
        "user": {"id": user["id"], "email": user["email"], "role": user["role"]},
        "profile": profile,
    }


@router.put("/profile")
async def update_profile(request_data: Profile, user: dict = Depends(get_current_user)):
    """Create or replace the current user's profile"""
    profile = await ProfileModel.upsert(user["id"], request_data)
    return {"profile": profile}
