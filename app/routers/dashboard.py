from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import get_db
from app.core.auth import get_current_user, get_current_admin
from app.models.user import UserRole
from app.schemas.dashboard import (
    ActivityItem,
    DashboardSummary,
    LowPerformerResponse,
    PerformanceResponse,
    TrendRecordResponse,
)
from app.schemas.user import UserResponse
from app.services import ratings as rating_store
from app.services import users as directory
from app.services.performance import (
    THRESHOLD_OPTIONS,
    TREND_MONTH_OPTIONS,
    build_trend_table,
    find_low_performers,
    low_performers_csv,
    month_key,
    recent_months,
    round_half_up,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _validate_window(months: int, threshold: float):
    if months not in TREND_MONTH_OPTIONS:
        raise HTTPException(400, f"months must be one of {list(TREND_MONTH_OPTIONS)}")
    if threshold not in THRESHOLD_OPTIONS:
        raise HTTPException(400, f"threshold must be one of {list(THRESHOLD_OPTIONS)}")


async def _load_trend(db: AsyncSession, months: int):
    keys = recent_months(months, date.today())
    users = await directory.list_users(db)
    window_ratings = await rating_store.get_ratings_for_months(db, keys)
    return users, build_trend_table(users, window_ratings, keys)


@router.get("", response_model=DashboardSummary)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    users = await directory.list_users(db)
    names = {u.uid: u.name for u in users}
    current_month = month_key(date.today())

    # 1. Developers assigned to me that I haven't rated this month
    my_ratings = await rating_store.get_ratings_by_rater(db, current_user.uid)
    rated_this_month = {r.given_to for r in my_ratings if r.month == current_month}
    to_rate = []
    for user in users:
        if user.role != UserRole.DEVELOPER.value or user.uid in rated_this_month:
            continue
        if current_user.role == UserRole.PROJECT_MANAGER.value:
            assigned = current_user.uid in (user.managers or [])
        elif current_user.role == UserRole.TEAM_LEAD.value:
            assigned = current_user.uid in (user.team_leads or [])
        else:
            assigned = False
        if assigned:
            to_rate.append(UserResponse.model_validate(user))

    # 2. My own average
    average_rating = None
    if current_user.role != UserRole.ADMIN.value:
        received = await rating_store.get_ratings_by_ratee(db, current_user.uid)
        if received:
            total = sum(r.average_score for r in received)
            average_rating = int(round_half_up(total / len(received)))

    # 3. Latest reviews I gave (get_ratings_by_rater is newest first)
    recent_activity = [
        ActivityItem(
            type="review",
            message=f"Completed review for {names.get(r.given_to, 'Unknown User')}",
            timestamp=r.created_at,
        )
        for r in my_ratings[:4]
    ]

    return DashboardSummary(
        month=current_month,
        total_users=len(users),
        users_to_rate=to_rate,
        pending_reviews=len(to_rate),
        average_rating=average_rating,
        recent_activity=recent_activity,
    )


@router.get("/performance", response_model=PerformanceResponse)
async def get_performance(
    months: int = settings.TREND_MONTHS,
    threshold: float = settings.LOW_PERFORMER_THRESHOLD,
    user_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    admin=Depends(get_current_admin)
):
    _validate_window(months, threshold)
    users, trend = await _load_trend(db, months)

    records = trend.for_user(user_id) if user_id else trend.records
    performers = find_low_performers(users, trend, threshold)

    return PerformanceResponse(
        months=trend.months,
        threshold=threshold,
        records=[TrendRecordResponse.model_validate(r) for r in records],
        overall_averages=trend.overall_averages,
        low_performers=[LowPerformerResponse.model_validate(p) for p in performers],
    )


@router.get("/low-performers.csv")
async def export_low_performers(
    months: int = settings.TREND_MONTHS,
    threshold: float = settings.LOW_PERFORMER_THRESHOLD,
    db: AsyncSession = Depends(get_db),
    admin=Depends(get_current_admin)
):
    _validate_window(months, threshold)
    users, trend = await _load_trend(db, months)
    performers = find_low_performers(users, trend, threshold)

    filename = f"Low Performers of {months} Month {date.today().isoformat()}.csv"
    return Response(
        content=low_performers_csv(performers, months),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
