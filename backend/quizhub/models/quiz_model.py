from typing import Any, Dict, List, Optional
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from ..database.connection import get_collection, QUIZZES
from .quiz import normalize_quiz
from ..utils.time_utils import utcnow


QUIZ_STATUSES = ("active", "upcoming", "past", "all")


def _to_quiz(doc: Optional[dict]) -> Optional[dict]:
    if doc:
        doc["id"] = str(doc["_id"])
        del doc["_id"]
    return doc


def to_object_id(quiz_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(quiz_id)
    except (InvalidId, TypeError):
        return None


def status_filter(status: str, now: datetime) -> Dict[str, Any]:
    """Mongo filter selecting quizzes by their window relative to ``now``"""
    if status == "active":
        return {"startTime": {"$lte": now}, "endTime": {"$gte": now}}
    if status == "upcoming":
        return {"startTime": {"$gt": now}}
    if status == "past":
        return {"endTime": {"$lt": now}}
    return {}


class QuizModel:
    @staticmethod
    async def create(quiz_data: Dict[str, Any]) -> dict:
        """Normalize and insert a new quiz"""
        now = utcnow()
        document = normalize_quiz(quiz_data, now=now)
        document["createdAt"] = now

        result = await get_collection(QUIZZES).insert_one(document)
        document["id"] = str(result.inserted_id)
        document.pop("_id", None)
        print(f"📝 Quiz created: {document['id']} ({document['title']})")
        return document

    @staticmethod
    async def find_by_id(quiz_id: str) -> Optional[dict]:
        oid = to_object_id(quiz_id)
        if oid is None:
            return None
        quiz = await get_collection(QUIZZES).find_one({"_id": oid})
        return _to_quiz(quiz)

    @staticmethod
    async def find(query: Dict[str, Any], projection: Optional[Dict[str, int]] = None) -> List[dict]:
        quizzes = []
        async for quiz in get_collection(QUIZZES).find(query, projection, sort=[("startTime", 1)]):
            quizzes.append(_to_quiz(quiz))
        return quizzes

    @staticmethod
    async def find_by_ids(quiz_ids: List[str]) -> Dict[str, dict]:
        oids = [oid for oid in (to_object_id(q) for q in set(quiz_ids)) if oid is not None]
        if not oids:
            return {}
        quizzes = await QuizModel.find({"_id": {"$in": oids}})
        return {quiz["id"]: quiz for quiz in quizzes}

    @staticmethod
    async def update(quiz_id: str, quiz_data: Dict[str, Any], not_started_at: datetime) -> Optional[dict]:
        """Replace the editable fields of a quiz that has not started yet.

        The start-time condition is part of the write filter, so a quiz that
        opened between the caller's check and this write is left untouched
        and ``None`` is returned.
        """
        oid = to_object_id(quiz_id)
        if oid is None:
            return None
        document = normalize_quiz(quiz_data)
        updated = await get_collection(QUIZZES).find_one_and_update(
            {"_id": oid, "startTime": {"$gt": not_started_at}},
            {"$set": document},
            return_document=ReturnDocument.AFTER,
        )
        return _to_quiz(updated)

    @staticmethod
    async def delete(quiz_id: str, not_started_at: datetime) -> bool:
        oid = to_object_id(quiz_id)
        if oid is None:
            return False
        result = await get_collection(QUIZZES).delete_one(
            {"_id": oid, "startTime": {"$gt": not_started_at}}
        )
        return result.deleted_count > 0

    @staticmethod
    async def count(query: Dict[str, Any]) -> int:
        return await get_collection(QUIZZES).count_documents(query)

    @staticmethod
    async def delete_by_instructor(instructor_id: str) -> List[str]:
        """Remove every quiz of an instructor, returning the removed quiz ids"""
        collection = get_collection(QUIZZES)
        quiz_ids = [str(doc["_id"]) async for doc in collection.find({"instructorId": instructor_id}, {"_id": 1})]
        if quiz_ids:
            await collection.delete_many({"instructorId": instructor_id})
        return quiz_ids
