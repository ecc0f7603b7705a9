from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel


class SubmittedAnswer(BaseModel):
    questionId: str
    selectedOptionIds: List[str] = []


class AttemptSubmission(BaseModel):
    answers: List[SubmittedAnswer]

    class Config:
        json_schema_extra = {
            "example": {
                "answers": [
                    {"questionId": "Xk3_pQ9aZ", "selectedOptionIds": ["a81Kd0_sQ"]}
                ]
            }
        }


class AnswerResult(BaseModel):
    questionId: str
    selectedOptionIds: List[str]
    isCorrect: bool
    scoreAwarded: int


class Attempt(BaseModel):
    id: Optional[str] = None
    quizId: str
    userId: str
    startTime: datetime
    endTime: datetime
    isScored: bool
    answers: List[AnswerResult]
    totalScore: int
    createdAt: Optional[datetime] = None
