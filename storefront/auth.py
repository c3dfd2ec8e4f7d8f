# storefront/auth.py
from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer

from storefront.config import SECRET_KEY, ALGORITHM

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def verify_token(token: str) -> CurrentUser:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("id")
    try:
        return CurrentUser(id=int(user_id), role=payload.get("role"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")


def create_token(user_id: int, role: Optional[str] = None) -> str:
    payload = {"id": user_id}
    if role:
        payload["role"] = role
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


async def get_current_user(token: str = Depends(oauth2_scheme)) -> CurrentUser:
    return verify_token(token)
