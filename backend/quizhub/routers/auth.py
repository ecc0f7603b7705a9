from fastapi import APIRouter, status
from pydantic import BaseModel, EmailStr, Field
import hashlib
import hmac
import secrets
from ..models.user import User, UserModel, ROLE_STUDENT, SELF_REGISTER_ROLES
from ..utils.errors import Unauthorized, ValidationError
from ..utils.jwt_utils import create_access_token


router = APIRouter(prefix="/api/auth", tags=["auth"])

PBKDF2_ITERATIONS = 200_000


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: str = ROLE_STUDENT


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


def hash_password(password: str, salt: str = None) -> str:
    """Salted PBKDF2-SHA256, stored as ``salt$hexdigest``"""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    salt, _, _ = stored.partition("$")
    return hmac.compare_digest(hash_password(password, salt), stored)


def _issue_token(user: dict) -> dict:
    token = create_access_token({"sub": user["id"], "email": user["email"], "role": user["role"]})
    return {
        "token": token,
        "user": User(
            id=user["id"], email=user["email"], role=user["role"], isApproved=user.get("isApproved")
        ).model_dump(exclude_none=True),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(request_data: RegisterRequest):
    """Register a new student or instructor and return an access token.

    Instructors are created pending approval by an admin.
    """
    if request_data.role not in SELF_REGISTER_ROLES:
        raise ValidationError("Invalid role")

    user = await UserModel.create({
        "email": request_data.email,
        "password": hash_password(request_data.password),
        "role": request_data.role,
    })
    print(f"👤 Registered {user['role']}: {user['email']}")
    return _issue_token(user)


@router.post("/login")
async def login(request_data: LoginRequest):
    user = await UserModel.find_by_email(request_data.email)
    if not user or not verify_password(request_data.password, user["password"]):
        raise Unauthorized("Invalid credentials")
    return _issue_token(user)
