from fastapi import APIRouter, Depends, Query, status
from ..middleware.auth import require_instructor, require_student
from ..models.attempt import AttemptSubmission
from ..models.quiz import QuizInput
from ..services.attempt_service import AttemptService
from ..services.quiz_service import QuizService
from ..services.statistics_service import StatisticsService

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])
quiz_service = QuizService()
attempt_service = AttemptService()
statistics_service = StatisticsService()


@router.get("")
async def get_assigned_quizzes(
    quiz_status: str = Query("active", alias="status"),
    user: dict = Depends(require_student),
):
    """Quizzes for the student's year (active, upcoming, past or all)"""
    return await quiz_service.list_assigned_quizzes(user, quiz_status)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_quiz(request_data: QuizInput, user: dict = Depends(require_instructor)):
    return await quiz_service.create_quiz(user, request_data)


@router.get("/{quiz_id}")
async def get_quiz_details(quiz_id: str, user: dict = Depends(require_student)):
    """Quiz for attempting: only inside its window, options without answers"""
    return await quiz_service.get_quiz_for_student(quiz_id, user)


@router.put("/{quiz_id}")
async def update_quiz(
    quiz_id: str,
    request_data: QuizInput,
    user: dict = Depends(require_instructor)
):
    """Update a quiz (owner only, before it starts)"""
    return await quiz_service.update_quiz(quiz_id, user, request_data)


@router.delete("/{quiz_id}")
async def delete_quiz(quiz_id: str, user: dict = Depends(require_instructor)):
    """Delete a quiz (owner only, before it starts)"""
    return await quiz_service.delete_quiz(quiz_id, user)


@router.get("/{quiz_id}/edit")
async def get_quiz_for_edit(quiz_id: str, user: dict = Depends(require_instructor)):
    return await quiz_service.get_quiz_for_edit(quiz_id, user)


@router.post("/{quiz_id}/attempt", status_code=status.HTTP_201_CREATED)
async def submit_quiz_attempt(
    quiz_id: str,
    request_data: AttemptSubmission,
    user: dict = Depends(require_student)
):
    """Submit answers; scored once per student while the quiz is open"""
    return await attempt_service.submit_attempt(quiz_id, user, request_data.answers)


@router.get("/{quiz_id}/results")
async def get_quiz_results(quiz_id: str, user: dict = Depends(require_student)):
    """Own attempt and answer key, available after the quiz ends"""
    return await attempt_service.get_results(quiz_id, user)


@router.get("/{quiz_id}/statistics")
async def get_quiz_statistics(
    quiz_id: str,
    refresh: bool = Query(False),
    user: dict = Depends(require_instructor)
):
    """Cached quiz statistics; ``refresh=true`` recomputes them from attempts"""
    return await statistics_service.get_statistics(quiz_id, user, force_refresh=refresh)


@router.get("/{quiz_id}/resultsForInstructor")
async def get_quiz_results_for_instructor(quiz_id: str, user: dict = Depends(require_instructor)):
    return await quiz_service.get_results_for_instructor(quiz_id, user)
