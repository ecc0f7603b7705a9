from typing import Dict, List, Mapping, Optional
from datetime import datetime
from ..models.attempt_model import AttemptModel
from ..models.profile import ProfileModel
from ..models.quiz_model import QuizModel, to_object_id
from ..models.quiz_statistics import CohortCount, QuizStatistics
from ..models.quiz_statistics_model import QuizStatisticsModel
from ..utils.errors import Forbidden, NotFound, ValidationError
from ..utils.time_utils import utcnow


def _cohort_sort_key(cohort: Optional[int]):
    # Attempts without a cohort sort first, as MongoDB orders null before numbers
    return (cohort is not None, cohort or 0)


def compute_statistics(
    quiz_id: str,
    attempts: List[dict],
    cohorts_by_user: Mapping[str, Optional[int]],
    now: Optional[datetime] = None,
) -> QuizStatistics:
    """Aggregate scored attempts into a statistics document.

    ``cohorts_by_user`` maps a userId to its yearOfStudy; users missing from
    it are counted under a ``None`` cohort.
    """
    scores = [a["totalScore"] for a in attempts]
    total_attempts = len(scores)

    by_cohort: Dict[Optional[int], int] = {}
    for attempt in attempts:
        cohort = cohorts_by_user.get(attempt["userId"])
        by_cohort[cohort] = by_cohort.get(cohort, 0) + 1

    return QuizStatistics(
        quizId=quiz_id,
        totalAttempts=total_attempts,
        averageScore=round(sum(scores) / total_attempts, 2) if total_attempts else 0,
        highestScore=max(scores) if scores else 0,
        lowestScore=min(scores) if scores else 0,
        attemptsByYear=[
            CohortCount(yearOfStudy=cohort, count=by_cohort[cohort])
            for cohort in sorted(by_cohort, key=_cohort_sort_key)
        ],
        lastUpdated=now or utcnow(),
    )


class StatisticsService:
    async def get_statistics(
        self,
        quiz_id: str,
        user: dict,
        force_refresh: bool = False,
        now: Optional[datetime] = None,
    ) -> dict:
        """Cached statistics for a quiz, recomputed when absent or on ``force_refresh``.

        Without ``force_refresh`` a cached document is returned as stored,
        even if newer attempts exist.
        """
        if to_object_id(quiz_id) is None:
            raise ValidationError("Invalid quiz ID")

        quiz = await QuizModel.find_by_id(quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")
        if quiz["instructorId"] != user["id"]:
            raise Forbidden("Not authorized to view this quiz")

        if not force_refresh:
            cached = await QuizStatisticsModel.find_by_quiz(quiz["id"])
            if cached:
                return cached

        return await self.refresh(quiz["id"], now=now)

    async def refresh(self, quiz_id: str, now: Optional[datetime] = None) -> dict:
        attempts = await AttemptModel.find_scored_by_quiz(quiz_id)
        profiles = await ProfileModel.find_by_users(a["userId"] for a in attempts)
        cohorts = {user_id: p.get("yearOfStudy") for user_id, p in profiles.items()}

        statistics = compute_statistics(quiz_id, attempts, cohorts, now=now)
        stored = await QuizStatisticsModel.replace(statistics)
        print(f"📊 Statistics refreshed for quiz {quiz_id}: {statistics.totalAttempts} attempts")
        return stored
