from typing import Dict, List, Optional
from datetime import datetime
from ..models.attempt_model import AttemptModel
from ..models.profile import ProfileModel
from ..models.quiz import QuizInput, quiz_for_edit, quiz_for_student, quiz_summary
from ..models.quiz_model import QuizModel, QUIZ_STATUSES, status_filter
from ..utils.errors import Forbidden, NotFound, QuizLocked, ValidationError, WindowClosed
from ..utils.time_utils import in_window, utcnow


def _check_status(status: str) -> str:
    if status not in QUIZ_STATUSES:
        raise ValidationError(f"Invalid status '{status}', expected one of {', '.join(QUIZ_STATUSES)}")
    return status


class QuizService:
    """Quiz authoring for instructors and quiz lookup for students."""

    async def _owned_quiz(self, quiz_id: str, user: dict, action: str) -> dict:
        quiz = await QuizModel.find_by_id(quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")
        if quiz["instructorId"] != user["id"]:
            raise Forbidden(f"Not authorized to {action} this quiz")
        return quiz

    async def _student_profile(self, user: dict) -> dict:
        profile = await ProfileModel.find_by_user(user["id"])
        if not profile:
            raise NotFound("Profile not found")
        return profile

    # ============ Instructor ============

    async def create_quiz(self, user: dict, payload: QuizInput) -> Dict:
        quiz = await QuizModel.create({**payload.model_dump(), "instructorId": user["id"]})
        return quiz_summary(quiz)

    async def update_quiz(
        self, quiz_id: str, user: dict, payload: QuizInput, now: Optional[datetime] = None
    ) -> Dict:
        now = now or utcnow()
        quiz = await self._owned_quiz(quiz_id, user, "update")
        if now >= quiz["startTime"]:
            raise QuizLocked("Cannot update quiz after start time")

        updated = await QuizModel.update(
            quiz["id"], {**payload.model_dump(), "instructorId": user["id"]}, not_started_at=now
        )
        if not updated:
            raise QuizLocked("Cannot update quiz after start time")
        return quiz_summary(updated)

    async def delete_quiz(self, quiz_id: str, user: dict, now: Optional[datetime] = None) -> Dict:
        now = now or utcnow()
        quiz = await self._owned_quiz(quiz_id, user, "delete")
        if now >= quiz["startTime"]:
            raise QuizLocked("Cannot delete quiz after start time")

        if not await QuizModel.delete(quiz["id"], not_started_at=now):
            raise QuizLocked("Cannot delete quiz after start time")
        print(f"🗑️ Quiz deleted: {quiz['id']}")
        return {"message": "Quiz deleted"}

    async def get_quiz_for_edit(self, quiz_id: str, user: dict) -> Dict:
        quiz = await self._owned_quiz(quiz_id, user, "edit")
        return quiz_for_edit(quiz)

    async def get_results_for_instructor(self, quiz_id: str, user: dict) -> List[Dict]:
        """Score of every scored attempt with the student's profile details"""
        quiz = await self._owned_quiz(quiz_id, user, "view")
        attempts = await AttemptModel.find_scored_by_quiz(quiz["id"])
        profiles = await ProfileModel.find_by_users(a["userId"] for a in attempts)

        results = []
        for attempt in attempts:
            profile = profiles.get(attempt["userId"])
            results.append({
                "usn": profile.get("rollNumber") if profile else "N/A",
                "studentName": f"{profile['firstName']} {profile['lastName']}" if profile else "N/A",
                "score": attempt["totalScore"],
                "yearOfStudy": profile.get("yearOfStudy") if profile else "N/A",
                "attemptDate": attempt.get("createdAt"),
            })
        return results

    async def list_instructor_quizzes(
        self, user: dict, status: str = "all", now: Optional[datetime] = None
    ) -> List[Dict]:
        now = now or utcnow()
        query = {"instructorId": user["id"], **status_filter(_check_status(status), now)}
        quizzes = await QuizModel.find(query)
        counts = await AttemptModel.count_scored_by_quizzes([q["id"] for q in quizzes])
        return [
            {**quiz_summary(quiz), "totalAttempts": counts.get(quiz["id"], 0)}
            for quiz in quizzes
        ]

    # ============ Student ============

    async def list_assigned_quizzes(
        self, user: dict, status: str = "active", now: Optional[datetime] = None
    ) -> List[Dict]:
        now = now or utcnow()
        profile = await self._student_profile(user)
        query = {"yearOfStudy": profile["yearOfStudy"], **status_filter(_check_status(status), now)}
        quizzes = await QuizModel.find(query)
        return [
            {
                **quiz_summary(quiz),
                "description": quiz.get("description"),
                "duration": quiz["duration"],
            }
            for quiz in quizzes
        ]

    async def get_quiz_for_student(
        self, quiz_id: str, user: dict, now: Optional[datetime] = None
    ) -> Dict:
        """Quiz questions for an open quiz of the student's cohort, without the answer key"""
        now = now or utcnow()
        profile = await self._student_profile(user)

        quiz = await QuizModel.find_by_id(quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")
        if quiz["yearOfStudy"] != profile["yearOfStudy"]:
            raise Forbidden("Quiz not assigned to your year")
        if not in_window(quiz["startTime"], quiz["endTime"], now):
            raise WindowClosed()

        return quiz_for_student(quiz)
