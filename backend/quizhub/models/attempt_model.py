from typing import Dict, List, Optional
from pymongo.errors import DuplicateKeyError
from ..database.connection import get_collection, QUIZ_ATTEMPTS
from .attempt import Attempt
from ..utils.errors import AlreadyAttempted


def _to_attempt(doc: Optional[dict]) -> Optional[dict]:
    if doc:
        doc["id"] = str(doc["_id"])
        del doc["_id"]
    return doc


class AttemptModel:
    @staticmethod
    async def create(attempt: Attempt) -> dict:
        """Insert an attempt. Attempts are never updated afterwards.

        A second scored attempt for the same quiz and user violates the
        ``one_scored_attempt_per_user`` index and is reported as
        ``AlreadyAttempted``.
        """
        attempt_data = attempt.model_dump(exclude={"id"})
        attempt_data["createdAt"] = attempt_data.get("createdAt") or attempt.endTime

        try:
            result = await get_collection(QUIZ_ATTEMPTS).insert_one(attempt_data)
        except DuplicateKeyError:
            print(f"⚠️ Duplicate scored attempt rejected: quiz={attempt.quizId} user={attempt.userId}")
            raise AlreadyAttempted()

        attempt_data["id"] = str(result.inserted_id)
        attempt_data.pop("_id", None)
        return attempt_data

    @staticmethod
    async def find_scored(quiz_id: str, user_id: str) -> Optional[dict]:
        doc = await get_collection(QUIZ_ATTEMPTS).find_one(
            {"quizId": quiz_id, "userId": user_id, "isScored": True}
        )
        return _to_attempt(doc)

    @staticmethod
    async def find_for_user(quiz_id: str, user_id: str) -> Optional[dict]:
        """The user's attempt on a quiz, preferring the scored one"""
        scored = await AttemptModel.find_scored(quiz_id, user_id)
        if scored:
            return scored
        doc = await get_collection(QUIZ_ATTEMPTS).find_one(
            {"quizId": quiz_id, "userId": user_id},
            sort=[("createdAt", -1)],
        )
        return _to_attempt(doc)

    @staticmethod
    async def find_scored_by_quiz(quiz_id: str) -> List[dict]:
        attempts = []
        async for doc in get_collection(QUIZ_ATTEMPTS).find(
            {"quizId": quiz_id, "isScored": True}, sort=[("createdAt", 1)]
        ):
            attempts.append(_to_attempt(doc))
        return attempts

    @staticmethod
    async def find_scored_by_user(user_id: str) -> List[dict]:
        attempts = []
        async for doc in get_collection(QUIZ_ATTEMPTS).find(
            {"userId": user_id, "isScored": True}, sort=[("createdAt", 1)]
        ):
            attempts.append(_to_attempt(doc))
        return attempts

    @staticmethod
    async def count_scored_by_quizzes(quiz_ids: List[str]) -> Dict[str, int]:
        """Number of scored attempts per quiz id"""
        if not quiz_ids:
            return {}
        counts = {quiz_id: 0 for quiz_id in quiz_ids}
        async for doc in get_collection(QUIZ_ATTEMPTS).find(
            {"quizId": {"$in": quiz_ids}, "isScored": True}, {"quizId": 1}
        ):
            counts[doc["quizId"]] = counts.get(doc["quizId"], 0) + 1
        return counts

    @staticmethod
    async def count_scored() -> int:
        return await get_collection(QUIZ_ATTEMPTS).count_documents({"isScored": True})

    @staticmethod
    async def delete_by_user(user_id: str) -> int:
        result = await get_collection(QUIZ_ATTEMPTS).delete_many({"userId": user_id})
        return result.deleted_count

    @staticmethod
    async def delete_by_quizzes(quiz_ids: List[str]) -> int:
        if not quiz_ids:
            return 0
        result = await get_collection(QUIZ_ATTEMPTS).delete_many({"quizId": {"$in": quiz_ids}})
        return result.deleted_count
