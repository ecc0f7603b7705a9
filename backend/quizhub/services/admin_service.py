from typing import Dict, List, Optional
from datetime import datetime
from ..models.attempt_model import AttemptModel
from ..models.profile import ProfileModel
from ..models.quiz_model import QuizModel, status_filter
from ..models.quiz_statistics_model import QuizStatisticsModel
from ..models.user import (
    UserModel,
    ROLES,
    ROLE_ADMIN,
    ROLE_INSTRUCTOR,
    ROLE_STUDENT,
    initial_approval,
)
from ..utils.errors import NotFound, ValidationError
from ..utils.time_utils import utcnow


def _user_summary(user: dict) -> Dict:
    return {
        "userId": user["id"],
        "email": user["email"],
        "role": user["role"],
        "isApproved": user.get("isApproved"),
    }


class AdminService:
    """User administration and platform-wide figures"""

    async def list_users(self, role: Optional[str] = None) -> List[Dict]:
        query = {"role": role} if role else {}
        return await UserModel.find(query)

    async def set_approval(self, user_id: str, is_approved: bool) -> Dict:
        user = await UserModel.find_by_id(user_id)
        if not user:
            raise NotFound("User not found")
        if user["role"] != ROLE_INSTRUCTOR:
            raise ValidationError("User is not an instructor")

        updated = await UserModel.update(user_id, {"isApproved": is_approved})
        print(f"🔑 Instructor {updated['email']} approval set to {is_approved}")
        return _user_summary(updated)

    async def change_role(self, user_id: str, role: str) -> Dict:
        """Changing role resets approval: a new instructor starts out pending"""
        if role not in ROLES:
            raise ValidationError("Invalid role")
        user = await UserModel.find_by_id(user_id)
        if not user:
            raise NotFound("User not found")

        updated = await UserModel.update(user_id, {"role": role, "isApproved": initial_approval(role)})
        print(f"🔑 Role of {updated['email']} changed to {role}")
        return _user_summary(updated)

    async def delete_user(self, user_id: str) -> Dict:
        """Delete a user with their profile and attempts.

        Deleting an instructor also removes their quizzes together with the
        attempts and cached statistics of those quizzes.
        """
        user = await UserModel.find_by_id(user_id)
        if not user:
            raise NotFound("User not found")

        await UserModel.delete(user_id)
        await ProfileModel.delete_by_user(user_id)
        await AttemptModel.delete_by_user(user_id)
        if user["role"] == ROLE_INSTRUCTOR:
            quiz_ids = await QuizModel.delete_by_instructor(user_id)
            await AttemptModel.delete_by_quizzes(quiz_ids)
            await QuizStatisticsModel.delete_by_quizzes(quiz_ids)
            print(f"🗑️ Removed {len(quiz_ids)} quizzes of instructor {user['email']}")

        print(f"🗑️ User deleted: {user['email']}")
        return {"message": "User deleted"}

    async def student_progress(self, user_id: str) -> Dict:
        user = await UserModel.find_by_id(user_id)
        if not user or user["role"] != ROLE_STUDENT:
            raise NotFound("Student not found")
        profile = await ProfileModel.find_by_user(user_id)
        if not profile:
            raise NotFound("Profile not found")

        attempts = await AttemptModel.find_scored_by_user(user_id)
        quizzes = await QuizModel.find_by_ids([a["quizId"] for a in attempts])
        total = sum(a["totalScore"] for a in attempts)
        return {
            "student": {
                "userId": user["id"],
                "email": user["email"],
                "firstName": profile["firstName"],
                "lastName": profile["lastName"],
                "yearOfStudy": profile["yearOfStudy"],
            },
            "attempts": [
                {
                    "quizId": a["quizId"],
                    "title": quizzes[a["quizId"]]["title"] if a["quizId"] in quizzes else None,
                    "totalScore": a["totalScore"],
                    "attemptDate": a.get("createdAt"),
                }
                for a in attempts
            ],
            "averageScore": total / len(attempts) if attempts else 0,
            "totalQuizzesAttempted": len(attempts),
        }

    async def platform_statistics(self, now: Optional[datetime] = None) -> Dict:
        """Platform totals; ``averageScore`` is the mean of the cached quiz averages"""
        now = now or utcnow()
        instructors = await UserModel.find({"role": ROLE_INSTRUCTOR})
        students = await UserModel.find({"role": ROLE_STUDENT})
        profiles = await ProfileModel.find_by_users([s["id"] for s in students])
        stats = await QuizStatisticsModel.find_all()

        return {
            "totalUsers": await UserModel.count({}),
            "studentCount": len(students),
            "instructorCount": len(instructors),
            "adminCount": await UserModel.count({"role": ROLE_ADMIN}),
            "totalQuizzes": await QuizModel.count({}),
            "activeQuizzes": await QuizModel.count(status_filter("active", now)),
            "totalCompletions": await AttemptModel.count_scored(),
            "averageScore": sum(s["averageScore"] for s in stats) / len(stats) if stats else 0,
            "instructorDetails": [
                {
                    "id": i["id"],
                    "email": i["email"],
                    "status": "approved" if i.get("isApproved") else "Not approved",
                }
                for i in instructors
            ],
            "studentDetails": [
                {
                    "id": s["id"],
                    "email": s["email"],
                    "yearOfStudy": profiles.get(s["id"], {}).get("yearOfStudy"),
                }
                for s in students
            ],
        }

    async def pending_instructors(self) -> List[Dict]:
        """Instructors waiting for approval, as admin notifications"""
        pending = await UserModel.find({"role": ROLE_INSTRUCTOR, "isApproved": False})
        return [
            {
                "id": p["id"],
                "userId": p["id"],
                "email": p["email"],
                "requestedRole": ROLE_INSTRUCTOR,
                "createdAt": p.get("createdAt"),
            }
            for p in pending
        ]
