"""Seed database with demo users, a profile and a quiz"""
import asyncio
from datetime import timedelta

from quizhub.database.connection import connect_to_mongo, close_mongo_connection, get_collection, USERS
from quizhub.models.profile import Profile, ProfileModel
from quizhub.models.quiz_model import QuizModel
from quizhub.models.user import UserModel, ROLE_ADMIN, ROLE_INSTRUCTOR, ROLE_STUDENT
from quizhub.routers.auth import hash_password
from quizhub.utils.time_utils import utcnow


async def seed_users() -> dict:
    """Seed default users, returning them by role"""
    if await get_collection(USERS).count_documents({}) > 0:
        print("Users already exist, skipping seed")
        return {}

    users = {}
    for role in (ROLE_STUDENT, ROLE_INSTRUCTOR, ROLE_ADMIN):
        users[role] = await UserModel.create({
            "email": f"{role}@example.com",
            "password": hash_password("password123"),
            "role": role,
        })
    # demo instructor skips the admin approval step
    users[ROLE_INSTRUCTOR] = await UserModel.update(users[ROLE_INSTRUCTOR]["id"], {"isApproved": True})
    print(f"✅ Seeded {len(users)} users")
    return users


async def seed_profile(student: dict):
    await ProfileModel.upsert(student["id"], Profile(
        firstName="John",
        lastName="Student",
        yearOfStudy=2,
        department="CSE",
        rollNumber="CSE2024-001",
    ))
    print("✅ Seeded student profile")


async def seed_quiz(instructor: dict):
    start = utcnow() + timedelta(minutes=5)
    quiz = await QuizModel.create({
        "title": "Data Structures Warm-up",
        "description": "Stacks, queues and hashing",
        "instructorId": instructor["id"],
        "yearOfStudy": 2,
        "startTime": start,
        "endTime": start + timedelta(days=1),
        "duration": 20,
        "questions": [
            {
                "text": "Which structure is LIFO?",
                "score": 5,
                "options": [
                    {"text": "Stack", "isCorrect": True},
                    {"text": "Queue"},
                ],
            },
            {
                "text": "Which of these give O(1) average lookup?",
                "score": 10,
                "options": [
                    {"text": "Hash table", "isCorrect": True},
                    {"text": "Python dict", "isCorrect": True},
                    {"text": "Linked list"},
                ],
            },
        ],
    })
    print(f"✅ Seeded quiz {quiz['id']}")


async def main():
    await connect_to_mongo()
    try:
        users = await seed_users()
        if users:
            await seed_profile(users["student"])
            await seed_quiz(users["instructor"])
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main())
