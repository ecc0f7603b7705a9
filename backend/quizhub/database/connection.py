from motor.motor_asyncio import AsyncIOMotorClient
from typing import Optional
import os
from pathlib import Path
from dotenv import load_dotenv
from urllib.parse import quote_plus, urlparse, urlunparse


# ---------------------------------------------------
# LOAD .env ONLY IN LOCAL DEVELOPMENT
# ---------------------------------------------------
if os.getenv("QUIZHUB_ENV", "development") == "development":
    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
        print("🔧 Loaded .env (local development)")


# Collection names
USERS = "users"
PROFILES = "profiles"
QUIZZES = "quizzes"
QUIZ_ATTEMPTS = "quiz_attempts"
QUIZ_STATISTICS = "quiz_statistics"


class MongoDB:
    client: Optional[AsyncIOMotorClient] = None
    database = None


# Global DB instance
db = MongoDB()


# ---------------------------------------------------
# ESCAPE CREDENTIALS IN THE MONGODB URL
# ---------------------------------------------------
def escape_mongodb_url(url: str) -> str:
    if not url or "://" not in url:
        return url

    parsed = urlparse(url)

    # No username or password present
    if not parsed.username and not parsed.password:
        return url

    username = quote_plus(parsed.username) if parsed.username else ""
    password = quote_plus(parsed.password) if parsed.password else ""

    if username and password:
        netloc = f"{username}:{password}@{parsed.hostname}"
    elif username:
        netloc = f"{username}@{parsed.hostname}"
    else:
        netloc = parsed.netloc
    if (username or password) and parsed.port:
        netloc += f":{parsed.port}"

    return urlunparse((
        parsed.scheme,
        netloc,
        parsed.path,
        parsed.params,
        parsed.query,
        parsed.fragment
    ))


# ---------------------------------------------------
# CONNECT TO MONGODB
# ---------------------------------------------------
async def connect_to_mongo():
    mongodb_url = os.getenv("MONGODB_URL")
    database_name = os.getenv("DATABASE_NAME", "quizhub")

    if not mongodb_url:
        raise RuntimeError("❌ MONGODB_URL is not set in environment variables.")

    mongodb_url = escape_mongodb_url(mongodb_url)

    print("🔗 Connecting to MongoDB...")

    client_options = {}
    if mongodb_url.startswith("mongodb+srv://"):
        try:
            import certifi
            client_options["tlsCAFile"] = certifi.where()
        except ImportError:
            print("⚠️ Warning: certifi not available, using system CA bundle")

    db.client = AsyncIOMotorClient(mongodb_url, **client_options)
    db.database = db.client[database_name]

    # Test connection
    try:
        await db.client.admin.command("ping")
        print(f"✅ Connected to MongoDB: {database_name}")
    except Exception as e:
        print(f"❌ Failed to connect to MongoDB: {e}")
        raise

    await ensure_indexes()


# ---------------------------------------------------
# INDEXES
# ---------------------------------------------------
async def ensure_indexes():
    """Create the indexes the data layer relies on.

    The two unique indexes on attempts and statistics are what keep
    "one scored attempt per user" and "one statistics document per quiz"
    true under concurrent requests.
    """
    database = get_database()
    if database is None:
        raise RuntimeError("Database not connected")

    await database[USERS].create_index("email", unique=True)
    await database[PROFILES].create_index("userId", unique=True)
    await database[PROFILES].create_index("yearOfStudy")

    for field in ("instructorId", "yearOfStudy", "startTime", "endTime"):
        await database[QUIZZES].create_index(field)

    await database[QUIZ_ATTEMPTS].create_index(
        [("quizId", 1), ("userId", 1)],
        unique=True,
        partialFilterExpression={"isScored": True},
        name="one_scored_attempt_per_user",
    )
    await database[QUIZ_ATTEMPTS].create_index("userId")

    await database[QUIZ_STATISTICS].create_index("quizId", unique=True)
    print("📇 MongoDB indexes ensured")


# ---------------------------------------------------
# DISCONNECT
# ---------------------------------------------------
async def close_mongo_connection():
    if db.client:
        db.client.close()
        print("🔌 MongoDB connection closed")


# ---------------------------------------------------
# ACCESS HELPERS
# ---------------------------------------------------
def get_database():
    return db.database


def get_collection(name: str):
    database = get_database()
    if database is None:
        raise RuntimeError("Database not connected")
    return database[name]
