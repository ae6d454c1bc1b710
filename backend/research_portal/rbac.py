from __future__ import annotations

from fastapi import HTTPException

from . import models

# purpose: role checks for office-only mutations
# status: active

OFFICE_ROLES: tuple[str, ...] = ("ibc_office", "admin")


def has_role(user: models.User, roles: list[str] | tuple[str, ...]) -> bool:
    if user.is_admin:
        return True
    return (user.role or "user") in roles


def ensure_role(user: models.User, roles: list[str] | tuple[str, ...] = OFFICE_ROLES):
    if not has_role(user, roles):
        raise HTTPException(status_code=403, detail="Not authorized")
