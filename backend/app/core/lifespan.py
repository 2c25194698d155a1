import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from .config import ensure_jwt_configured
from .database import init_db, engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- 앱 시작 ---
    logger.info("✅ FastAPI 앱이 시작됩니다.")

    # 서명 키 없이 요청을 받으면 안 되므로 여기서 실패하면 기동 중단
    try:
        ensure_jwt_configured()
    except Exception as e:
        logger.error(f"⛔ JWT 설정 누락으로 앱을 시작할 수 없습니다: {e}")
        raise

    await init_db()

    # --- 앱 종료 ---
    yield
    logger.info("✅ FastAPI 앱이 종료됩니다.")
    if engine:
        logger.info("✅ 데이터베이스 엔진 연결을 종료합니다.")
        await engine.dispose()
        logger.info("✅ 데이터베이스 엔진이 종료되었습니다.")
