from fastapi import APIRouter, Depends
from ..middleware.auth import require_student
from ..services.dashboard_service import DashboardService

router = APIRouter(prefix="/api/students", tags=["students"])
dashboard_service = DashboardService()


@router.get("/dashboard")
async def get_student_dashboard(user: dict = Depends(require_student)):
    """Completed, active and upcoming quizzes plus the student's mean score"""
    return await dashboard_service.student_dashboard(user)
