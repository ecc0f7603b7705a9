from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from datetime import datetime
from contextlib import asynccontextmanager
import asyncio
import os
import signal

from quizhub.database.connection import connect_to_mongo, close_mongo_connection, get_database
from quizhub.utils.errors import QuizHubError


# --------------------------------------------------------
# FATAL LOOP ERRORS
# --------------------------------------------------------
# An exception nobody awaited is not recoverable here: stop serving and let
# the process supervisor start a fresh instance.
# --------------------------------------------------------
def fatal_exception_handler(loop: asyncio.AbstractEventLoop, context: dict):
    error = context.get("exception") or context.get("message")
    print(f"💥 Unhandled error in event loop: {error!r}, shutting down")
    os.kill(os.getpid(), signal.SIGTERM)


# --------------------------------------------------------
# LIFESPAN
# --------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    asyncio.get_running_loop().set_exception_handler(fatal_exception_handler)
    await connect_to_mongo()

    yield

    await close_mongo_connection()


app = FastAPI(title="QuizHub", lifespan=lifespan)


# --------------------------------------------------------
# CORS
# --------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------------------------------------------------------
# ERROR RESPONSES: {"message": ...}
# --------------------------------------------------------
@app.exception_handler(QuizHubError)
async def quizhub_error_handler(request: Request, exc: QuizHubError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(status_code=400, content={"message": "; ".join(messages)})


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    print(f"❌ {request.method} {request.url.path} failed: {exc!r}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


# --------------------------------------------------------
# ROUTERS
# --------------------------------------------------------
from quizhub.routers import (
    auth,
    users,
    quizzes,
    students,
    instructors,
    admin,
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(quizzes.router)
app.include_router(students.router)
app.include_router(instructors.router)
app.include_router(admin.router)


# --------------------------------------------------------
# HEALTH CHECK
# --------------------------------------------------------
@app.get("/health")
async def health_check():
    mongodb_status = "disconnected"
    try:
        db = get_database()
        if db is not None:
            await db.command("ping")
            mongodb_status = "connected"
    except Exception as e:
        mongodb_status = f"error: {str(e)}"

    return {
        "status": "ok",
        "time": datetime.now().isoformat(),
        "database": {"mongodb": mongodb_status},
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("quizhub.main:app", host="0.0.0.0", port=int(os.getenv("PORT", 3001)))
