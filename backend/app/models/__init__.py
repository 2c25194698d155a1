from .user import User
from .user_role import UserRole, Role
from .refresh_token import RefreshToken, RevocationReason
from .favorite_location import FavoriteLocation
