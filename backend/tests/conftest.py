"""
Pytest fixtures: an in-memory MongoDB (mongomock-motor) wired into the
connection holder, an HTTP client against the ASGI app, and factories for
users, profiles and quizzes.
"""
import os

os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ["QUIZHUB_ENV"] = "test"

from datetime import datetime, timedelta

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from quizhub.database.connection import db, ensure_indexes
from quizhub.main import app
from quizhub.models.profile import Profile, ProfileModel
from quizhub.models.quiz_model import QuizModel
from quizhub.models.user import UserModel
from quizhub.utils.jwt_utils import create_access_token
from quizhub.utils.time_utils import utcnow


T0 = datetime(2026, 3, 2, 9, 0, 0)
T1 = T0 + timedelta(hours=1)


@pytest.fixture
async def database():
    db.client = AsyncMongoMockClient()
    db.database = db.client["quizhub_test"]
    await ensure_indexes()
    yield db.database
    db.client = None
    db.database = None


@pytest.fixture
async def client(database):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


def auth_headers(user: dict) -> dict:
    token = create_access_token({"sub": user["id"], "email": user["email"], "role": user["role"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(database):
    counter = {"n": 0}

    async def factory(role: str = "student", year_of_study: int = None) -> dict:
        counter["n"] += 1
        user = await UserModel.create({
            "email": f"{role}{counter['n']}@example.com",
            "password": "not-used",
            "role": role,
        })
        if year_of_study is not None:
            await ProfileModel.upsert(user["id"], Profile(
                firstName="Student",
                lastName=str(counter["n"]),
                yearOfStudy=year_of_study,
                department="CSE",
                rollNumber=f"USN{counter['n']:03d}",
            ))
        return user

    return factory


def quiz_payload(start: datetime = T0, end: datetime = T1, year_of_study: int = 2) -> dict:
    return {
        "title": "Stacks and Queues",
        "description": "Week 3",
        "yearOfStudy": year_of_study,
        "startTime": start,
        "endTime": end,
        "duration": 30,
        "questions": [
            {
                "questionId": "q1",
                "text": "Which structure is LIFO?",
                "score": 10,
                "options": [
                    {"optionId": "A", "text": "Stack", "isCorrect": True},
                    {"optionId": "B", "text": "Queue"},
                ],
            },
            {
                "questionId": "q2",
                "text": "Which are linear structures?",
                "score": 5,
                "options": [
                    {"optionId": "A", "text": "Array", "isCorrect": True},
                    {"optionId": "B", "text": "Linked list", "isCorrect": True},
                    {"optionId": "C", "text": "Tree"},
                ],
            },
        ],
    }


@pytest.fixture
def make_quiz(database):
    async def factory(instructor: dict, start: datetime = T0, end: datetime = T1, year_of_study: int = 2) -> dict:
        return await QuizModel.create({
            **quiz_payload(start, end, year_of_study),
            "instructorId": instructor["id"],
        })

    return factory


@pytest.fixture
def open_window():
    """A window around the real current time, for tests going through HTTP"""
    now = utcnow()
    return now - timedelta(hours=1), now + timedelta(hours=1)
