from typing import Dict, Iterable, List, Optional
from pydantic import BaseModel, Field
from ..database.connection import get_collection, PROFILES
from ..utils.time_utils import utcnow


class Profile(BaseModel):
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    yearOfStudy: int = Field(..., ge=0, le=4)
    department: str = Field(..., min_length=1)
    rollNumber: str = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "firstName": "Asha",
                "lastName": "Rao",
                "yearOfStudy": 2,
                "department": "CSE",
                "rollNumber": "1XX21CS001"
            }
        }


def _to_profile(doc: Optional[dict]) -> Optional[dict]:
    if doc:
        doc["id"] = str(doc["_id"])
        del doc["_id"]
    return doc


class ProfileModel:
    @staticmethod
    async def find_by_user(user_id: str) -> Optional[dict]:
        doc = await get_collection(PROFILES).find_one({"userId": user_id})
        return _to_profile(doc)

    @staticmethod
    async def find_by_users(user_ids: Iterable[str]) -> Dict[str, dict]:
        """Profiles for many users, keyed by userId. Users without a profile are absent."""
        ids: List[str] = list(set(user_ids))
        if not ids:
            return {}
        profiles = {}
        async for doc in get_collection(PROFILES).find({"userId": {"$in": ids}}):
            profile = _to_profile(doc)
            profiles[profile["userId"]] = profile
        return profiles

    @staticmethod
    async def upsert(user_id: str, profile: Profile) -> dict:
        """Create or replace the profile of a user"""
        now = utcnow()
        collection = get_collection(PROFILES)
        await collection.update_one(
            {"userId": user_id},
            {
                "$set": {**profile.model_dump(), "updatedAt": now},
                "$setOnInsert": {"userId": user_id, "createdAt": now},
            },
            upsert=True,
        )
        return await ProfileModel.find_by_user(user_id)

    @staticmethod
    async def delete_by_user(user_id: str) -> int:
        result = await get_collection(PROFILES).delete_many({"userId": user_id})
        return result.deleted_count
