from typing import Dict, Optional
from datetime import datetime
from ..models.attempt_model import AttemptModel
from ..models.profile import ProfileModel
from ..models.quiz_model import QuizModel, status_filter
from ..models.quiz_statistics_model import QuizStatisticsModel
from ..utils.errors import NotFound
from ..utils.time_utils import utcnow


def _window(quiz: dict) -> Dict:
    return {
        "id": quiz["id"],
        "title": quiz["title"],
        "startTime": quiz["startTime"],
        "endTime": quiz["endTime"],
    }


class DashboardService:
    async def student_dashboard(self, user: dict, now: Optional[datetime] = None) -> Dict:
        now = now or utcnow()
        profile = await ProfileModel.find_by_user(user["id"])
        if not profile:
            raise NotFound("Profile not found")

        attempts = await AttemptModel.find_scored_by_user(user["id"])
        quizzes = await QuizModel.find_by_ids([a["quizId"] for a in attempts])
        cohort = {"yearOfStudy": profile["yearOfStudy"]}
        active = await QuizModel.find({**cohort, **status_filter("active", now)})
        upcoming = await QuizModel.find({**cohort, **status_filter("upcoming", now)})

        total = sum(a["totalScore"] for a in attempts)
        return {
            "completedQuizzes": [
                {
                    "quizId": a["quizId"],
                    # quiz may have been removed since
                    "title": quizzes[a["quizId"]]["title"] if a["quizId"] in quizzes else None,
                    "totalScore": a["totalScore"],
                    "attemptDate": a.get("createdAt"),
                }
                for a in attempts
            ],
            "activeQuizzes": [_window(q) for q in active],
            "upcomingQuizzes": [_window(q) for q in upcoming],
            "averageScore": total / len(attempts) if attempts else 0,
        }

    async def instructor_dashboard(self, user: dict, now: Optional[datetime] = None) -> Dict:
        """Overview built from the statistics cache, so figures may lag new attempts"""
        now = now or utcnow()
        owned = {"instructorId": user["id"]}
        quizzes = await QuizModel.find(owned, {"_id": 1})
        active = await QuizModel.find({**owned, **status_filter("active", now)})
        stats = await QuizStatisticsModel.find_by_quizzes([q["id"] for q in quizzes])

        total_quizzes = len(quizzes)
        total_attempts = sum(s["totalAttempts"] for s in stats)
        return {
            "totalQuizzes": total_quizzes,
            "activeQuizzes": [_window(q) for q in active],
            "averageAttemptsPerQuiz": total_attempts / total_quizzes if total_quizzes else 0,
            "averageScoreAcrossQuizzes": (
                sum(s["averageScore"] for s in stats) / len(stats) if stats else 0
            ),
        }
