# app/services/ratings.py
import logging
from datetime import date
from typing import Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AlreadyRatedError,
    CriteriaNotConfiguredError,
    NotFoundError,
    PermissionDeniedError,
)
from app.models.rating import Rating
from app.models.user import User, UserRole
from app.schemas.rating import RatingUpdate
from app.services import criteria as criteria_source
from app.services import users as directory
from app.services.performance import combine_monthly_score, compute_rating_score, recent_months

logger = logging.getLogger(__name__)


async def get_ratings_by_rater(db: AsyncSession, uid: str) -> List[Rating]:
    result = await db.execute(
        select(Rating)
        .where(Rating.given_by == uid)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    )
    return list(result.scalars().all())


async def get_ratings_by_ratee(db: AsyncSession, uid: str) -> List[Rating]:
    result = await db.execute(
        select(Rating)
        .where(Rating.given_to == uid)
        .order_by(Rating.month.desc(), Rating.id)
    )
    return list(result.scalars().all())


async def get_ratings_by_month(db: AsyncSession, month: Optional[str] = None) -> List[Rating]:
    """Ratings for ``month``, or every rating when no month is given."""
    query = select(Rating)
    if month:
        query = query.where(Rating.month == month)
    result = await db.execute(query.order_by(Rating.month.desc(), Rating.id))
    return list(result.scalars().all())


async def get_ratings_for_months(
    db: AsyncSession, months: Sequence[str], given_to: Optional[str] = None
) -> List[Rating]:
    if not months:
        return []
    query = select(Rating).where(Rating.month.in_(list(months)))
    if given_to:
        query = query.where(Rating.given_to == given_to)
    result = await db.execute(query.order_by(Rating.id))
    return list(result.scalars().all())


async def get_rating(db: AsyncSession, rating_id: int) -> Optional[Rating]:
    result = await db.execute(select(Rating).where(Rating.id == rating_id))
    return result.scalar_one_or_none()


async def has_rated(db: AsyncSession, given_by: str, given_to: str, month: str) -> bool:
    result = await db.execute(
        select(Rating.id)
        .where(Rating.given_by == given_by)
        .where(Rating.given_to == given_to)
        .where(Rating.month == month)
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def create_rating(db: AsyncSession, data: dict) -> int:
    """Store a rating as-is. The one-per-month rule is checked by ``submit_rating``."""
    rating = Rating(**data)
    db.add(rating)
    await db.commit()
    await db.refresh(rating)
    return rating.id


def can_rate(rater: User, ratee: User) -> bool:
    if rater.uid == ratee.uid:
        return False
    if rater.role == UserRole.ADMIN.value:
        return True
    if rater.role == UserRole.PROJECT_MANAGER.value:
        assigned = ratee.managers or []
    elif rater.role == UserRole.TEAM_LEAD.value:
        assigned = ratee.team_leads or []
    else:
        return False
    if ratee.role == UserRole.DEVELOPER.value:
        return rater.uid in assigned
    return True


async def submit_rating(
    db: AsyncSession,
    rater: User,
    ratee_uid: str,
    month: str,
    scores: Dict[str, int],
    remarks: str = "",
) -> Rating:
    ratee = await directory.get_user(db, ratee_uid)
    if not ratee:
        raise NotFoundError("User not found")
    if not can_rate(rater, ratee):
        raise PermissionDeniedError("You are not allowed to rate this user")

    criteria_set = await criteria_source.get_criteria_for_role(db, rater.role)
    if criteria_set is None or not criteria_set.criteria:
        raise CriteriaNotConfiguredError(f"No rating criteria configured for role {rater.role}")

    # Check-then-insert; two concurrent submissions can both pass this check.
    if await has_rated(db, rater.uid, ratee.uid, month):
        logger.info("Rejected duplicate rating %s -> %s for %s", rater.uid, ratee.uid, month)
        raise AlreadyRatedError(rater.uid, ratee.uid, month)

    titles = {c["title"] for c in criteria_set.criteria}
    rating_id = await create_rating(db, {
        "given_by": rater.uid,
        "given_to": ratee.uid,
        "month": month,
        "criteria": {title: score for title, score in scores.items() if title in titles},
        "average_score": compute_rating_score(scores, criteria_set.criteria),
        "remarks": remarks or "",
        "role_of_given_to": ratee.role,
    })
    logger.info("Stored rating %s: %s -> %s for %s", rating_id, rater.uid, ratee.uid, month)
    return await get_rating(db, rating_id)


async def update_rating(db: AsyncSession, rating_id: int, data: RatingUpdate) -> Rating:
    rating = await get_rating(db, rating_id)
    if not rating:
        raise NotFoundError("Rating not found")

    if data.remarks is not None:
        rating.remarks = data.remarks
    if data.scores is not None:
        # Rescore against the rater's current criteria
        roles = await directory.get_roles(db, [rating.given_by])
        criteria_set = None
        if rating.given_by in roles:
            criteria_set = await criteria_source.get_criteria_for_role(db, roles[rating.given_by])
        if criteria_set is None:
            raise CriteriaNotConfiguredError("Cannot rescore: rater criteria unavailable")
        titles = {c["title"] for c in criteria_set.criteria}
        rating.criteria = {title: score for title, score in data.scores.items() if title in titles}
        rating.average_score = compute_rating_score(data.scores, criteria_set.criteria)

    db.add(rating)
    await db.commit()
    await db.refresh(rating)
    return rating


async def delete_rating(db: AsyncSession, rating_id: int) -> None:
    rating = await get_rating(db, rating_id)
    if not rating:
        raise NotFoundError("Rating not found")
    await db.delete(rating)
    await db.commit()
    logger.info("Deleted rating %s", rating_id)


async def get_average_ratings(
    db: AsyncSession, user_id: str, months: int, today: Optional[date] = None
) -> Dict[str, float]:
    """Combined PM/TL score of ``user_id`` for each of the last ``months`` months, 0 when unrated."""
    keys = recent_months(months, today)
    received = await get_ratings_for_months(db, keys, given_to=user_id)
    rater_roles = await directory.get_roles(db, {r.given_by for r in received})

    by_month: Dict[str, List[Rating]] = {key: [] for key in keys}
    for rating in received:
        by_month[rating.month].append(rating)
    return {key: combine_monthly_score(by_month[key], rater_roles) for key in keys}
