from typing import Dict, Iterable, Optional
from datetime import datetime
from ..models.attempt import Attempt, SubmittedAnswer
from ..models.attempt_model import AttemptModel
from ..models.quiz_model import QuizModel
from ..utils.errors import AlreadyAttempted, NotFound, ResultsNotYetAvailable, WindowClosed
from ..utils.time_utils import in_window, utcnow
from .scoring import evaluate


class AttemptService:
    """Admission of quiz submissions and read-back of a student's result."""

    async def submit_attempt(
        self,
        quiz_id: str,
        user: dict,
        answers: Iterable[SubmittedAnswer],
        now: Optional[datetime] = None,
    ) -> Dict:
        """Admit, score and store one attempt.

        Checks run in order and each fails fast: the quiz must exist, ``now``
        must fall inside ``[startTime, endTime]``, and the user must not
        already hold a scored attempt for the quiz. The store's unique index
        on scored attempts backs up the last check against concurrent
        submissions.
        """
        now = now or utcnow()
        user_id = user["id"]

        quiz = await QuizModel.find_by_id(quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")

        is_scored = in_window(quiz["startTime"], quiz["endTime"], now)
        if not is_scored:
            raise WindowClosed()

        if await AttemptModel.find_scored(quiz["id"], user_id):
            raise AlreadyAttempted()

        evaluated_answers, total_score = evaluate(quiz, answers)

        stored = await AttemptModel.create(Attempt(
            quizId=quiz["id"],
            userId=user_id,
            startTime=now,
            endTime=now,
            isScored=is_scored,
            answers=evaluated_answers,
            totalScore=total_score,
        ))
        print(f"✅ Attempt {stored['id']} stored: quiz={quiz['id']} user={user_id} score={total_score}")

        return {
            "attemptId": stored["id"],
            "quizId": quiz["id"],
            "totalScore": total_score,
            "isScored": is_scored,
        }

    async def get_results(self, quiz_id: str, user: dict, now: Optional[datetime] = None) -> Dict:
        """The requesting user's own attempt together with the answer key.

        Only available once the quiz window has closed.
        """
        now = now or utcnow()

        quiz = await QuizModel.find_by_id(quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")
        if now < quiz["endTime"]:
            raise ResultsNotYetAvailable()

        attempt = await AttemptModel.find_for_user(quiz["id"], user["id"])
        if not attempt:
            raise NotFound("No attempt found for this quiz")

        return {
            "attempt": {
                "attemptId": attempt["id"],
                "quizId": attempt["quizId"],
                "totalScore": attempt["totalScore"],
                "isScored": attempt["isScored"],
                "answers": attempt["answers"],
            },
            "quiz": {
                "quizId": quiz["id"],
                "title": quiz["title"],
                "totalScore": quiz.get("totalScore", 0),
                "questions": [
                    {
                        "questionId": q["questionId"],
                        "text": q["text"],
                        "options": q.get("options", []),
                        "correctOptionIds": q.get("correctOptionIds", []),
                        "score": q["score"],
                    }
                    for q in quiz.get("questions", [])
                ],
            },
        }
