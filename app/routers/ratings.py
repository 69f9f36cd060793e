# app/routers/ratings.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_admin, get_current_user
from app.database import get_db
from app.models.user import UserRole
from app.schemas.rating import (
    MONTH_PATTERN,
    MonthlyAverageResponse,
    RatingCheckResponse,
    RatingCreate,
    RatingResponse,
    RatingUpdate,
)
from app.services import ratings as rating_store
from app.services.performance import TREND_MONTH_OPTIONS

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("", response_model=RatingResponse, status_code=201)
async def submit_rating(
    rating_in: RatingCreate,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await rating_store.submit_rating(
        db,
        rater=current_user,
        ratee_uid=rating_in.given_to,
        month=rating_in.month,
        scores=rating_in.scores,
        remarks=rating_in.remarks,
    )


@router.get("", response_model=List[RatingResponse])
async def list_ratings(
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    return await rating_store.get_ratings_by_month(db, month)


@router.get("/given", response_model=List[RatingResponse])
async def get_my_given_ratings(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await rating_store.get_ratings_by_rater(db, current_user.uid)


@router.get("/received", response_model=List[RatingResponse])
async def get_my_received_ratings(
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await rating_store.get_ratings_by_ratee(db, current_user.uid)


@router.get("/check", response_model=RatingCheckResponse)
async def check_existing_rating(
    given_to: str,
    month: str = Query(..., pattern=MONTH_PATTERN),
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    exists = await rating_store.has_rated(db, current_user.uid, given_to, month)
    return RatingCheckResponse(given_to=given_to, month=month, exists=exists)


@router.get("/user/{uid}", response_model=List[RatingResponse])
async def get_user_ratings(
    uid: str,
    as_rater: bool = False,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    if as_rater:
        return await rating_store.get_ratings_by_rater(db, uid)
    return await rating_store.get_ratings_by_ratee(db, uid)


@router.get("/averages/{uid}", response_model=MonthlyAverageResponse)
async def get_average_ratings(
    uid: str,
    months: int = 3,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    if months not in TREND_MONTH_OPTIONS:
        raise HTTPException(400, f"months must be one of {list(TREND_MONTH_OPTIONS)}")
    if current_user.role != UserRole.ADMIN.value and current_user.uid != uid:
        raise HTTPException(403, "Admin access required")

    averages = await rating_store.get_average_ratings(db, uid, months)
    return MonthlyAverageResponse(user_id=uid, months=averages)


@router.put("/{rating_id}", response_model=RatingResponse)
async def update_rating(
    rating_id: int,
    rating_in: RatingUpdate,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    return await rating_store.update_rating(db, rating_id, rating_in)


@router.delete("/{rating_id}", status_code=204)
async def delete_rating(
    rating_id: int,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    await rating_store.delete_rating(db, rating_id)
