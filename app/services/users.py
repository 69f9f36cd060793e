# app/services/users.py
import logging
import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ConflictError, NotFoundError
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate
from app.utils.password import hash_password

logger = logging.getLogger(__name__)


async def list_users(db: AsyncSession, role: Optional[UserRole] = None) -> List[User]:
    query = select(User)
    if role:
        query = query.where(User.role == UserRole(role).value)
    result = await db.execute(query.order_by(User.name))
    return list(result.scalars().all())


async def get_user(db: AsyncSession, uid: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.uid == uid))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_roles(db: AsyncSession, uids: Iterable[str]) -> Dict[str, str]:
    """uid -> role for the given uids. Unknown uids are simply absent."""
    uids = list(set(uids))
    if not uids:
        return {}
    result = await db.execute(select(User.uid, User.role).where(User.uid.in_(uids)))
    return {row.uid: row.role for row in result.fetchall()}


async def create_user(db: AsyncSession, data: UserCreate) -> str:
    email = data.email.lower()
    if await get_user_by_email(db, email):
        raise ConflictError("Email already registered")

    user = User(
        uid=uuid.uuid4().hex,
        name=data.name,
        email=email,
        role=data.role.value,
        managers=list(data.managers),
        team_leads=list(data.team_leads),
        hashed_password=hash_password(data.password or settings.DEFAULT_USER_PASSWORD),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created user %s (%s)", user.uid, user.role)
    return user.uid


async def update_user(db: AsyncSession, uid: str, data: UserUpdate) -> User:
    user = await get_user(db, uid)
    if not user:
        raise NotFoundError("User not found")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("email"):
        email = changes["email"].lower()
        existing = await get_user_by_email(db, email)
        if existing and existing.uid != uid:
            raise ConflictError("Email already registered")
        changes["email"] = email
    if changes.get("role") is not None:
        changes["role"] = UserRole(changes["role"]).value

    for field, value in changes.items():
        if value is None and field in ("name", "email", "role"):
            continue
        if field in ("managers", "team_leads"):
            value = list(value or [])
        setattr(user, field, value)

    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, uid: str) -> None:
    """Ratings given to or by the user are kept; aggregation skips them."""
    user = await get_user(db, uid)
    if not user:
        raise NotFoundError("User not found")
    await db.delete(user)
    await db.commit()
    logger.info("Deleted user %s", uid)
