import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

class AuthServiceError(Exception):
    """인증/사용자 서비스 공통 예외"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ValidationError(AuthServiceError):
    """필수 입력 누락 또는 형식 오류"""

class ConflictError(AuthServiceError):
    """이메일 중복"""

class AuthenticationError(AuthServiceError):
    """이메일/비밀번호 불일치"""

class NotFoundError(AuthServiceError):
    status_code = status.HTTP_404_NOT_FOUND

class InvalidStateError(AuthServiceError):
    """토큰은 존재하지만 만료 또는 폐기된 상태"""

class PersistenceError(AuthServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

class ConfigurationError(AuthServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthServiceError)
    async def handle_auth_service_error(request: Request, exc: AuthServiceError):
        if exc.status_code >= 500:
            logger.error(f"⛔ {request.method} {request.url.path} 처리 실패: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid input", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"⛔ {request.method} {request.url.path} 처리 중 예외 발생: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An unexpected error occurred"},
        )
