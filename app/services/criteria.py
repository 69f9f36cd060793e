# app/services/criteria.py
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.criteria import CriteriaSet
from app.models.user import UserRole
from app.schemas.criteria import Criterion

logger = logging.getLogger(__name__)


async def get_criteria_for_role(db: AsyncSession, role: UserRole) -> Optional[CriteriaSet]:
    result = await db.execute(
        select(CriteriaSet).where(CriteriaSet.role == UserRole(role).value)
    )
    return result.scalar_one_or_none()


async def upsert_criteria(db: AsyncSession, role: UserRole, criteria: List[Criterion]) -> CriteriaSet:
    """Replace the criteria of ``role``, creating the set on first use."""
    payload = [c.model_dump() for c in criteria]
    criteria_set = await get_criteria_for_role(db, role)
    if criteria_set is None:
        criteria_set = CriteriaSet(role=UserRole(role).value, criteria=payload)
    else:
        criteria_set.criteria = payload

    total = sum(c.weight for c in criteria)
    if total != 100:
        logger.warning("Criteria for %s sum to %s, not 100", UserRole(role).value, total)

    db.add(criteria_set)
    await db.commit()
    await db.refresh(criteria_set)
    return criteria_set


async def delete_criteria(db: AsyncSession, role: UserRole) -> None:
    criteria_set = await get_criteria_for_role(db, role)
    if criteria_set is None:
        raise NotFoundError("Criteria set not found")
    await db.delete(criteria_set)
    await db.commit()
