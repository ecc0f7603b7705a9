from fastapi import APIRouter, Depends, Query
from ..middleware.auth import require_instructor
from ..services.dashboard_service import DashboardService
from ..services.quiz_service import QuizService

router = APIRouter(prefix="/api/instructors", tags=["instructors"])
quiz_service = QuizService()
dashboard_service = DashboardService()


@router.get("/quizzes")
async def get_instructor_quizzes(
    quiz_status: str = Query("all", alias="status"),
    user: dict = Depends(require_instructor),
):
    """Own quizzes with their number of scored attempts"""
    return await quiz_service.list_instructor_quizzes(user, quiz_status)


@router.get("/dashboard")
async def get_instructor_dashboard(user: dict = Depends(require_instructor)):
    return await dashboard_service.instructor_dashboard(user)
