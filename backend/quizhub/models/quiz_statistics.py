from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel


class CohortCount(BaseModel):
    yearOfStudy: Optional[int] = None  # None: attempt owner has no profile
    count: int


class QuizStatistics(BaseModel):
    quizId: str
    totalAttempts: int = 0
    averageScore: float = 0
    highestScore: int = 0
    lowestScore: int = 0
    attemptsByYear: List[CohortCount] = []
    lastUpdated: Optional[datetime] = None
