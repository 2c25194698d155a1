from datetime import datetime
from pydantic import Field

from schemas.token import CamelModel

class FavoriteLocationCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

class FavoriteLocationResponse(CamelModel):
    name: str
    latitude: float
    longitude: float
    saved_at: datetime

class FavoritesResponse(CamelModel):
    locations: list[FavoriteLocationResponse]

class FavoriteChangeResponse(FavoritesResponse):
    success: bool

class FavoriteCheckResponse(CamelModel):
    favorite: bool
