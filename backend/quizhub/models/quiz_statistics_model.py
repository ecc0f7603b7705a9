from typing import Optional
from pymongo import ReturnDocument
from ..database.connection import get_collection, QUIZ_STATISTICS
from .quiz_statistics import QuizStatistics


def _to_statistics(doc: Optional[dict]) -> Optional[dict]:
    if doc:
        doc["id"] = str(doc["_id"])
        del doc["_id"]
    return doc


class QuizStatisticsModel:
    @staticmethod
    async def find_by_quiz(quiz_id: str) -> Optional[dict]:
        doc = await get_collection(QUIZ_STATISTICS).find_one({"quizId": quiz_id})
        return _to_statistics(doc)

    @staticmethod
    async def find_by_quizzes(quiz_ids: list) -> list:
        if not quiz_ids:
            return []
        stats = []
        async for doc in get_collection(QUIZ_STATISTICS).find({"quizId": {"$in": quiz_ids}}):
            stats.append(_to_statistics(doc))
        return stats

    @staticmethod
    async def replace(statistics: QuizStatistics) -> dict:
        """Atomically overwrite (or create) the statistics document of a quiz"""
        doc = await get_collection(QUIZ_STATISTICS).find_one_and_replace(
            {"quizId": statistics.quizId},
            statistics.model_dump(),
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return _to_statistics(doc)

    @staticmethod
    async def find_all() -> list:
        stats = []
        async for doc in get_collection(QUIZ_STATISTICS).find({}):
            stats.append(_to_statistics(doc))
        return stats

    @staticmethod
    async def delete_by_quizzes(quiz_ids: list) -> int:
        if not quiz_ids:
            return 0
        result = await get_collection(QUIZ_STATISTICS).delete_many({"quizId": {"$in": quiz_ids}})
        return result.deleted_count
