from pydantic import EmailStr

from schemas.token import CamelModel, Tokens

class UserProfile(CamelModel):
    id: str
    username: str
    email: EmailStr
    roles: list[str] = []
    jwt: str

class UserCreate(CamelModel):
    # 빈 값 검사는 서비스에서 ValidationError로 처리
    email: str = ""
    password: str = ""
    username: str = ""

class UserLogin(CamelModel):
    email: str = ""
    password: str = ""

class AuthResponse(CamelModel):
    user: UserProfile
    tokens: Tokens

class MessageResponse(CamelModel):
    """
    간단한 성공/오류 메시지 반환용
    """
    message: str
