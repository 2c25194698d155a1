import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from email_validator import validate_email, EmailNotValidError

from core.config import settings
from core.exceptions import ValidationError
from core.security.hashing import hash_password, verify_password
from core.time import utcnow
from models.user import User
from models.user_role import UserRole, Role, DEFAULT_ROLE

logger = logging.getLogger(__name__)

def normalize_email(email: str) -> str:
    return email.strip().lower()

def check_email_format(email: str) -> None:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Email is not a valid email address")

def _is_ascii_digit(c: str) -> bool:
    return "0" <= c <= "9"

def _is_ascii_lower(c: str) -> bool:
    return "a" <= c <= "z"

def _is_ascii_upper(c: str) -> bool:
    return "A" <= c <= "Z"

def check_password_policy(password: str) -> None:
    """길이, 숫자, 소문자, 대문자, 특수문자 규칙 검사 (문자 종류는 ASCII 범위만 인정)"""
    errors = []
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        errors.append(f"Passwords must be at least {settings.PASSWORD_MIN_LENGTH} characters.")
    if not any(_is_ascii_digit(c) for c in password):
        errors.append("Passwords must have at least one digit ('0'-'9').")
    if not any(_is_ascii_lower(c) for c in password):
        errors.append("Passwords must have at least one lowercase ('a'-'z').")
    if not any(_is_ascii_upper(c) for c in password):
        errors.append("Passwords must have at least one uppercase ('A'-'Z').")
    if all(_is_ascii_digit(c) or _is_ascii_lower(c) or _is_ascii_upper(c) for c in password):
        errors.append("Passwords must have at least one non alphanumeric character.")
    if errors:
        raise ValidationError(f"Registration failed: {' '.join(errors)}")

class UserGeneralService:
    async def check_existence(
            self,
            db: AsyncSession,
            field: str,
            value: str
    ) -> bool:
        """중복 확인: 존재하면 True, 없으면 False"""
        if field == "username":
            query = select(User).where(User.username == value)
        elif field == "email":
            query = select(User).where(User.email == normalize_email(value))
        else:
            raise ValueError("지원하지 않는 필드입니다.")

        result = await db.execute(query)
        return result.scalars().first() is not None

    async def create_user_general(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
        roles: tuple[Role, ...] = (DEFAULT_ROLE,),
    ) -> User:
        """회원가입으로 신규 사용자 생성 (기본 역할 "User" 부여)"""
        new_user = User(
            username=username,
            email=normalize_email(email),
            hashed_password=hash_password(password),
            created_at=utcnow(),
        )
        new_user.roles = [UserRole(role=role) for role in roles]
        db.add(new_user)
        await db.flush()
        return new_user

    async def get_user_by_id(self, db: AsyncSession, user_id: str) -> User | None:
        result = await db.execute(select(User).where(User.user_id == user_id))
        return result.scalars().first()

    def user_lock_statement(self, user_id: str):
        return select(User).where(User.user_id == user_id).with_for_update()

    async def lock_user(self, db: AsyncSession, user_id: str) -> User | None:
        """
        사용자 행 잠금 (SELECT ... FOR UPDATE)
        로그아웃과 토큰 교체가 같은 사용자에 대해 순서대로 실행되게 한다
        SQLite는 쓰기 자체가 직렬화되므로 FOR UPDATE를 생략한다
        """
        result = await db.execute(self.user_lock_statement(user_id))
        return result.scalars().first()

    async def get_user_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalars().first()

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> User | None:
        """이메일/비밀번호 확인. 사용자 없음과 비밀번호 불일치를 구분하지 않는다"""
        user = await self.get_user_by_email(db, email)
        if user is None or not verify_password(password, user.hashed_password):
            return None
        return user

    async def mark_login(self, db: AsyncSession, user: User) -> User:
        user.last_login_at = utcnow()
        db.add(user)
        await db.flush()
        return user

    async def delete_user(self, db: AsyncSession, user: User) -> None:
        """사용자 삭제 (리프레시 토큰, 즐겨찾기는 CASCADE)"""
        await db.delete(user)
        await db.flush()

user_general_service = UserGeneralService()
