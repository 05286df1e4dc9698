"""Access to user records: lookups used by authentication and membership, plus admin bootstrap."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from projecthub import models
from projecthub.core.security import hash_password
from projecthub.schemas.enums import SystemRole


def find_by_id(db: Session, user_id: uuid.UUID) -> Optional[models.User]:
    return db.get(models.User, user_id)


def find_by_email_or_username(
    db: Session, email: Optional[str] = None, username: Optional[str] = None
) -> Optional[models.User]:
    conditions = []
    if email:
        conditions.append(models.User.email == email.strip().lower())
    if username:
        conditions.append(models.User.username == username.strip().lower())
    if not conditions:
        return None
    return db.query(models.User).filter(or_(*conditions)).first()


def ensure_admin(db: Session, email: str, username: str, password: str) -> models.User:
    """Create a system admin, or promote the existing user with this email or username."""
    user = find_by_email_or_username(db, email=email, username=username)
    if user is None:
        user = models.User(
            email=email.strip().lower(),
            username=username.strip().lower(),
            hashed_password=hash_password(password),
            is_active=True,
        )
        db.add(user)
    user.role = SystemRole.ADMIN.value
    db.commit()
    db.refresh(user)
    return user
