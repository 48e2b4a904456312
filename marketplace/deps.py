# marketplace/deps.py
import os
from dataclasses import dataclass
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.db import get_db
from marketplace.errors import Unauthorized, Forbidden
from marketplace.models import ROLE_ADMIN
from marketplace import crud

security = HTTPBearer(auto_error=False)

SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change_me_long_secret")
ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    id: int
    role: str


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    if credentials is None:
        raise Unauthorized("Missing auth token")
    token = credentials.credentials
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise Unauthorized("Invalid token")

    # role is read from the store; the token only carries the id
    user = await crud.get_user_by_id(db, user_id)
    if not user:
        raise Unauthorized("Invalid token")
    return Identity(id=user.id, role=user.role)


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if identity.role != ROLE_ADMIN:
        raise Forbidden("Admin role required")
    return identity
