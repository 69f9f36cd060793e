# app/routers/users.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_admin, get_current_user
from app.database import get_db
from app.models.user import UserRole
from app.schemas.user import UserCreate, UserImportResponse, UserResponse, UserUpdate
from app.services import imports
from app.services import users as directory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[UserRole] = None,
    db: AsyncSession = Depends(get_db),
    current_user = Depends(get_current_user)
):
    return await directory.list_users(db, role)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    user_in: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    uid = await directory.create_user(db, user_in)
    return await directory.get_user(db, uid)


@router.post("/upload", response_model=UserImportResponse)
async def upload_users(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    content = await file.read()
    try:
        rows = imports.parse_user_rows(file.filename, content)
    except imports.UNREADABLE_FILE_ERRORS as e:
        logger.warning("Could not read uploaded file %s: %s", file.filename, e)
        raise HTTPException(400, "Could not read the uploaded file")
    except ValueError as e:
        raise HTTPException(400, str(e))

    result = await imports.import_users(db, rows)
    return UserImportResponse(success=result.success, errors=result.errors)


@router.get("/{uid}", response_model=UserResponse)
async def get_user(
    uid: str,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    user = await directory.get_user(db, uid)
    if not user:
        raise HTTPException(404, "User not found")
    return user


@router.put("/{uid}", response_model=UserResponse)
async def update_user(
    uid: str,
    user_in: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    return await directory.update_user(db, uid, user_in)


@router.delete("/{uid}", status_code=204)
async def delete_user(
    uid: str,
    db: AsyncSession = Depends(get_db),
    admin = Depends(get_current_admin)
):
    if uid == admin.uid:
        raise HTTPException(400, "You cannot delete your own account")
    await directory.delete_user(db, uid)
