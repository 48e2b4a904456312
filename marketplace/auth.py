# marketplace/auth.py
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Literal
from datetime import datetime, timedelta, timezone
from jose import jwt
import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy.ext.asyncio import AsyncSession
from .db import get_db
from .deps import Identity, get_current_identity, SECRET_KEY, ALGORITHM
from .errors import ValidationError, Unauthorized, NotFound, store_errors
from .formatters import format_artisan, format_user
from .validation import normalize_email
from .models import ROLE_ARTISAN, ROLE_CUSTOMER
from . import crud

ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

router = APIRouter(prefix="/auth", tags=["auth"])

class SignupIn(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Literal["customer", "artisan"] = ROLE_CUSTOMER

    @field_validator("name", mode="before")
    @classmethod
    def _trim(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def _normalize(cls, v):
        return normalize_email(v) if isinstance(v, str) else v

class LoginIn(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def _normalize(cls, v):
        return normalize_email(v) if isinstance(v, str) else v

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


def create_access_token(data: dict, expires_delta: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_delta)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def token_for(user) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role})


@router.post("/signup", response_model=TokenOut, status_code=201)
async def signup(payload: SignupIn, db: AsyncSession = Depends(get_db)):
    existing = await crud.get_user_by_email(db, payload.email)
    if existing:
        raise ValidationError("Email already registered")
    async with store_errors(db, "AUTH"):
        user = await crud.create_user(db, payload.name, payload.email, payload.password, role=payload.role)
    print(f"[AUTH] signup user={user.id} role={user.role}")
    return {"access_token": token_for(user), "token_type": "bearer"}

@router.post("/login", response_model=TokenOut)
async def login(payload: LoginIn, db: AsyncSession = Depends(get_db)):
    user = await crud.get_user_by_email(db, payload.email)
    if not user or not crud.verify_password(payload.password, user.password_hash):
        raise Unauthorized("Invalid credentials")
    return {"access_token": token_for(user), "token_type": "bearer"}

@router.get("/me")
async def me(identity: Identity = Depends(get_current_identity), db: AsyncSession = Depends(get_db)):
    user = await crud.get_user_by_id(db, identity.id)
    if not user:
        raise NotFound("User not found")
    return format_artisan(user) if user.role == ROLE_ARTISAN else format_user(user)
