from typing import Any, Dict, List, Optional
from pydantic import BaseModel, EmailStr
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from ..database.connection import get_collection, USERS
from ..utils.errors import ValidationError
from ..utils.time_utils import utcnow


ROLE_STUDENT = "student"
ROLE_INSTRUCTOR = "instructor"
ROLE_ADMIN = "admin"
ROLES = (ROLE_STUDENT, ROLE_INSTRUCTOR, ROLE_ADMIN)
SELF_REGISTER_ROLES = (ROLE_STUDENT, ROLE_INSTRUCTOR)

# Never sent back to clients
PUBLIC_FIELDS = {"email": 1, "role": 1, "isApproved": 1, "createdAt": 1}


class User(BaseModel):
    id: Optional[str] = None
    email: EmailStr
    role: str  # 'student', 'instructor' or 'admin'
    isApproved: Optional[bool] = None  # instructors only
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "john@example.com",
                "role": "student",
            }
        }


def initial_approval(role: str) -> Optional[bool]:
    """Instructors start out pending approval; other roles carry no flag"""
    return False if role == ROLE_INSTRUCTOR else None


def _to_object_id(user_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        return None


def _to_user(doc: Optional[dict]) -> Optional[dict]:
    if doc:
        doc["id"] = str(doc["_id"])
        del doc["_id"]
    return doc


class UserModel:
    @staticmethod
    async def find_by_email(email: str) -> Optional[dict]:
        """Find user by email"""
        user = await get_collection(USERS).find_one({"email": email.lower()})
        return _to_user(user)

    @staticmethod
    async def find_by_id(user_id: str) -> Optional[dict]:
        """Find user by ID"""
        oid = _to_object_id(user_id)
        if oid is None:
            return None
        user = await get_collection(USERS).find_one({"_id": oid})
        return _to_user(user)

    @staticmethod
    async def find(query: Dict[str, Any]) -> List[dict]:
        """Users matching ``query``, without password hashes"""
        users = []
        async for doc in get_collection(USERS).find(query, PUBLIC_FIELDS, sort=[("createdAt", 1)]):
            users.append(_to_user(doc))
        return users

    @staticmethod
    async def count(query: Dict[str, Any]) -> int:
        return await get_collection(USERS).count_documents(query)

    @staticmethod
    async def create(user_data: dict) -> dict:
        """Create a new user; the email must not be registered yet"""
        user_data["email"] = user_data["email"].lower()
        user_data.setdefault("isApproved", initial_approval(user_data["role"]))
        user_data["createdAt"] = utcnow()
        user_data["updatedAt"] = user_data["createdAt"]

        try:
            result = await get_collection(USERS).insert_one(user_data)
        except DuplicateKeyError:
            raise ValidationError("Email already exists")
        user_data["id"] = str(result.inserted_id)
        user_data.pop("_id", None)
        return user_data

    @staticmethod
    async def update(user_id: str, fields: Dict[str, Any]) -> Optional[dict]:
        """Set ``fields`` on a user and return the updated document"""
        oid = _to_object_id(user_id)
        if oid is None:
            return None
        updated = await get_collection(USERS).find_one_and_update(
            {"_id": oid},
            {"$set": {**fields, "updatedAt": utcnow()}},
            projection=PUBLIC_FIELDS,
            return_document=ReturnDocument.AFTER,
        )
        return _to_user(updated)

    @staticmethod
    async def delete(user_id: str) -> bool:
        oid = _to_object_id(user_id)
        if oid is None:
            return False
        result = await get_collection(USERS).delete_one({"_id": oid})
        return result.deleted_count > 0
