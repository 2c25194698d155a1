import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security.dependencies import get_current_user
from models.user import User
from schemas.favorite_location import (
    FavoriteLocationCreate,
    FavoritesResponse,
    FavoriteChangeResponse,
    FavoriteCheckResponse,
)
from services.user.favorites import favorites_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/favorites", tags=["Favorites"])

@router.get("", response_model=FavoritesResponse)
async def get_favorites(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """나의 즐겨찾기 위치 목록"""
    return await favorites_service.get_favorites(db, user.user_id)

@router.post("", response_model=FavoriteChangeResponse)
async def add_favorite(
    location_in: FavoriteLocationCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    """위치 추가 (이미 있으면 무시)"""
    return await favorites_service.add_favorite(
        db,
        user_id=user.user_id,
        name=location_in.name.strip(),
        latitude=location_in.latitude,
        longitude=location_in.longitude,
    )

@router.get("/{location}", response_model=FavoriteCheckResponse)
async def check_favorite(
    location: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    return FavoriteCheckResponse(favorite=await favorites_service.is_favorite(db, user.user_id, location))

@router.delete("/{location}", response_model=FavoriteChangeResponse)
async def remove_favorite(
    location: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user)
):
    result = await favorites_service.remove_favorite(db, user.user_id, location)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Favorite location '{location}' not found for the current user."
        )
    return result
