# app/auth.py
# The upstream auth proxy authenticates callers and forwards the principal
# in X-User-Id / X-User-Role.
from typing import Optional

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

ADMIN_ROLE = "admin"


class Principal(BaseModel):
    user_id: int
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def require_principal(x_user_id: Optional[str] = Header(None),
                      x_user_role: Optional[str] = Header(None)) -> Principal:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="authentication required")
    try:
        user_id = int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="invalid principal")
    if user_id < 1:
        raise HTTPException(status_code=401, detail="invalid principal")
    return Principal(user_id=user_id, role=(x_user_role or "user").strip().lower())


def require_admin(principal: Principal = Depends(require_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="admin role required")
    return principal
