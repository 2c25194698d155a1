import logging
import uvicorn
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import get_db
from core.exceptions import register_exception_handlers
from core.lifespan import lifespan
from routers import user_profile, user_favorite
from routers.auth import user_general, token

logger = logging.getLogger(__name__)

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins, # 교차-출처 요청을 보낼 수 있는 출처의 리스트
    allow_credentials=True, # 교차-출처 요청시 쿠키 지원 여부를 설정
    allow_methods=["*"], # 교차-출처 요청을 허용하는 HTTP 메소드의 리스트
    allow_headers=["*"], # 교차-출처를 지원하는 HTTP 요청 헤더의 리스트
)

register_exception_handlers(app)

# 라우터 연결
app.include_router(user_general.router)
app.include_router(token.router)
app.include_router(user_profile.router)
app.include_router(user_favorite.router)

@app.get("/")
def read_root():
    return {"message": "Weather BFF API is up and running"}

@app.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    checks = [{"name": "self", "status": "Healthy"}]
    try:
        await db.execute(text("SELECT 1"))
        checks.append({"name": "database", "status": "Healthy"})
    except Exception as e:
        logger.error(f"⛔ 데이터베이스 헬스체크 실패: {e}")
        checks.append({"name": "database", "status": "Unhealthy"})

    overall = "Healthy" if all(c["status"] == "Healthy" for c in checks) else "Unhealthy"
    return JSONResponse(
        status_code=200 if overall == "Healthy" else 503,
        content={"status": overall, "checks": checks},
    )

if __name__ == "__main__":
    uvicorn.run("main:app",
                host="localhost",
                port=8000,
                reload=True)
