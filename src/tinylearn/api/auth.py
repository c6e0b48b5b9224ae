"""
Authentication and Authorization Module
JWT-based authentication for the TinyLearn API
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from tinylearn.config import get_settings
from tinylearn.models.database import get_db
from tinylearn.models.database_models import AccountStatus, User, UserRole
from tinylearn.models.repositories import UserRepository
from tinylearn.services.errors import ErrorCode, ServiceError
from tinylearn.services.users import UserService

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# HTTP Bearer token; missing credentials are reported as 401 below
security = HTTPBearer(auto_error=False)

PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Z])(?=.*\d).{8,}$")


class Token(BaseModel):
    access_token: str
    token_type: str


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    first_name: str
    last_name: str
    email: str
    password: str
    role: UserRole = UserRole.STUDENT
    age: Optional[int] = None
    grade: Optional[str] = None
    parent_email: Optional[str] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if '@' not in v:
            raise ValueError('Invalid email format')
        return v.strip().lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if not PASSWORD_PATTERN.match(v):
            raise ValueError('Password must be at least 8 characters long and contain '
                             'at least one capital letter and a number.')
        return v

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, v):
        if not 2 <= len(v.strip()) <= 50:
            raise ValueError('Names must be between 2 and 50 characters long')
        return v.strip()

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v == UserRole.ADMIN:
            raise ValueError('Admin accounts cannot be self-registered')
        return v

    @field_validator('age')
    @classmethod
    def validate_age(cls, v):
        if v is not None and not 1 <= v <= 120:
            raise ValueError('Age must be between 1 and 120')
        return v


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from JWT token"""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Access token required")

    try:
        payload = jwt.decode(credentials.credentials, settings.jwt_secret_key,
                             algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError:
        raise _unauthorized("Invalid token")

    email = payload.get("sub")
    if email is None:
        raise _unauthorized("Invalid token")

    user = UserRepository(db).get_by_email(email)
    if user is None:
        raise _unauthorized("Could not validate credentials")
    return user


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """Get current active user"""
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")
    if current_user.account_status == AccountStatus.SUSPENDED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is suspended")
    if current_user.account_status != AccountStatus.APPROVED:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="Account is awaiting administrator approval")
    return current_user


def login_for_access_token(service: UserService, login_data: LoginRequest) -> tuple:
    """Login logic: returns the token and the authenticated user"""
    user = service.get_by_email(login_data.email)
    if user is None or not verify_password(login_data.password, user.hashed_password):
        raise ServiceError(ErrorCode.UNAUTHORIZED, "Incorrect email or password")
    service.check_can_login(user)
    service.record_login(user)

    access_token = create_access_token(
        data={"sub": user.email, "role": user.role.value, "uid": user.id}
    )
    return Token(access_token=access_token, token_type="bearer"), user


def register_user(service: UserService, data: RegisterRequest) -> User:
    """Register a new user"""
    return service.register(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        role=data.role,
        age=data.age,
        grade=data.grade,
        parent_email=data.parent_email,
    )
