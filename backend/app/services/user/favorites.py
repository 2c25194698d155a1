import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from models.favorite_location import FavoriteLocation
from schemas.favorite_location import (
    FavoriteLocationResponse,
    FavoritesResponse,
    FavoriteChangeResponse,
)

logger = logging.getLogger(__name__)

class FavoritesService:
    async def _find(self, db: AsyncSession, user_id: str, name: str) -> FavoriteLocation | None:
        result = await db.execute(
            select(FavoriteLocation).where(
                FavoriteLocation.user_id == user_id,
                FavoriteLocation.location_name == name,
            )
        )
        return result.scalars().first()

    async def get_favorites(self, db: AsyncSession, user_id: str) -> FavoritesResponse:
        """저장한 위치 목록 (최근 저장 순)"""
        result = await db.execute(
            select(FavoriteLocation)
            .where(FavoriteLocation.user_id == user_id)
            .order_by(FavoriteLocation.saved_at.desc())
        )
        return FavoritesResponse(locations=[
            FavoriteLocationResponse(
                name=fav.location_name,
                latitude=fav.latitude,
                longitude=fav.longitude,
                saved_at=fav.saved_at,
            )
            for fav in result.scalars().all()
        ])

    async def add_favorite(
        self,
        db: AsyncSession,
        user_id: str,
        name: str,
        latitude: float,
        longitude: float,
    ) -> FavoriteChangeResponse:
        """이미 저장된 이름이면 그대로 두고 현재 목록 반환"""
        if await self._find(db, user_id, name) is None:
            db.add(FavoriteLocation(
                user_id=user_id,
                location_name=name,
                latitude=latitude,
                longitude=longitude,
            ))
            try:
                await db.commit()
                logger.info(f"💡 즐겨찾기 추가: user={user_id}, location={name}")
            except IntegrityError:
                # 동시에 같은 이름이 먼저 저장됨
                await db.rollback()
                logger.info(f"💡 즐겨찾기 이미 존재: user={user_id}, location={name}")

        favorites = await self.get_favorites(db, user_id)
        return FavoriteChangeResponse(success=True, locations=favorites.locations)

    async def remove_favorite(self, db: AsyncSession, user_id: str, name: str) -> FavoriteChangeResponse:
        favorite = await self._find(db, user_id, name)
        if favorite is None:
            favorites = await self.get_favorites(db, user_id)
            return FavoriteChangeResponse(success=False, locations=favorites.locations)

        await db.delete(favorite)
        await db.commit()
        logger.info(f"💡 즐겨찾기 삭제: user={user_id}, location={name}")

        favorites = await self.get_favorites(db, user_id)
        return FavoriteChangeResponse(success=True, locations=favorites.locations)

    async def is_favorite(self, db: AsyncSession, user_id: str, name: str) -> bool:
        return await self._find(db, user_id, name) is not None

favorites_service = FavoritesService()
