# app/routers/criteria.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_admin, get_current_user
from app.database import get_db
from app.models.user import UserRole
from app.schemas.criteria import CriteriaSetResponse, CriteriaSetUpsert
from app.services import criteria as criteria_source

router = APIRouter(prefix="/criteria", tags=["criteria"])


@router.get("/{role}", response_model=CriteriaSetResponse)
async def get_criteria(
    role: UserRole,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    criteria_set = await criteria_source.get_criteria_for_role(db, role)
    if criteria_set is None:
        raise HTTPException(404, "No criteria configured for this role")
    return CriteriaSetResponse.from_model(criteria_set)


@router.put("/{role}", response_model=CriteriaSetResponse)
async def upsert_criteria(
    role: UserRole,
    criteria_in: CriteriaSetUpsert,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    criteria_set = await criteria_source.upsert_criteria(db, role, criteria_in.criteria)
    return CriteriaSetResponse.from_model(criteria_set)


@router.delete("/{role}", status_code=204)
async def delete_criteria(
    role: UserRole,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    await criteria_source.delete_criteria(db, role)
