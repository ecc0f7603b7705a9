from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
import secrets
import string
from ..utils.errors import ValidationError
from ..utils.time_utils import to_naive_utc, utcnow


ID_ALPHABET = string.ascii_letters + string.digits + "-_"


def generate_short_id(length: int = 9) -> str:
    """Generate a short random identifier for questions and options, e.g. 'Xk3_pQ9aZ'"""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


class Option(BaseModel):
    optionId: Optional[str] = None
    text: str = Field(..., min_length=1)
    isCorrect: bool = False


class Question(BaseModel):
    questionId: Optional[str] = None
    text: str = Field(..., min_length=1)
    options: List[Option] = []
    score: int = Field(..., ge=1)


class QuizInput(BaseModel):
    """Body of quiz create and update requests"""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    yearOfStudy: int = Field(..., ge=1, le=4)
    startTime: datetime
    endTime: datetime
    duration: int = Field(..., ge=1)  # minutes
    questions: List[Question]

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Data Structures - Week 3",
                "yearOfStudy": 2,
                "startTime": "2026-03-01T09:00:00Z",
                "endTime": "2026-03-01T10:00:00Z",
                "duration": 30,
                "questions": [
                    {
                        "text": "Which structure is LIFO?",
                        "score": 5,
                        "options": [
                            {"text": "Stack", "isCorrect": True},
                            {"text": "Queue"}
                        ]
                    }
                ]
            }
        }


def _require_unique(ids: List[str], message: str):
    if len(set(ids)) != len(ids):
        raise ValidationError(message)


def normalize_quiz(data: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Return the document to persist for a quiz.

    Assigns missing question/option ids and recomputes the derived fields
    (``correctOptionIds`` per question, ``totalScore``) from the options'
    ``isCorrect`` flags and the question scores. Whatever derived values the
    input carried are discarded. Must run before every insert and update.
    """
    start_time = to_naive_utc(data["startTime"])
    end_time = to_naive_utc(data["endTime"])
    if end_time <= start_time:
        raise ValidationError("End time must be after start time")

    questions = []
    for question in data.get("questions") or []:
        options = [
            {
                "optionId": option.get("optionId") or generate_short_id(),
                "text": option["text"],
                "isCorrect": bool(option.get("isCorrect")),
            }
            for option in question.get("options") or []
        ]
        _require_unique([o["optionId"] for o in options], "Duplicate option id")
        questions.append({
            "questionId": question.get("questionId") or generate_short_id(),
            "text": question["text"],
            "options": options,
            "score": question["score"],
            "correctOptionIds": [o["optionId"] for o in options if o["isCorrect"]],
        })
    # answers are matched to questions by id
    _require_unique([q["questionId"] for q in questions], "Duplicate question id")

    normalized = dict(data)
    normalized.update({
        "startTime": start_time,
        "endTime": end_time,
        "questions": questions,
        "totalScore": sum(q["score"] for q in questions),
        "updatedAt": now or utcnow(),
    })
    return normalized


def quiz_summary(quiz: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "quizId": quiz["id"],
        "title": quiz["title"],
        "yearOfStudy": quiz["yearOfStudy"],
        "startTime": quiz["startTime"],
        "endTime": quiz["endTime"],
    }


def quiz_for_student(quiz: Dict[str, Any]) -> Dict[str, Any]:
    """Quiz as shown while attempting it: no correctness information."""
    return {
        "quizId": quiz["id"],
        "title": quiz["title"],
        "duration": quiz["duration"],
        "questions": [
            {
                "questionId": q["questionId"],
                "text": q["text"],
                "options": [
                    {"optionId": o["optionId"], "text": o["text"]}
                    for o in q.get("options", [])
                ],
            }
            for q in quiz.get("questions", [])
        ],
    }


def quiz_for_edit(quiz: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "quizId": quiz["id"],
        "title": quiz["title"],
        "description": quiz.get("description"),
        "duration": quiz["duration"],
        "startTime": quiz["startTime"],
        "endTime": quiz["endTime"],
        "yearOfStudy": quiz["yearOfStudy"],
        "totalScore": quiz.get("totalScore", 0),
        "questions": [
            {
                "questionId": q["questionId"],
                "text": q["text"],
                "score": q["score"],
                "options": q.get("options", []),
                "correctOptionIds": q.get("correctOptionIds", []),
            }
            for q in quiz.get("questions", [])
        ],
    }
