# app/main.py

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager
from arq.connections import create_pool, RedisSettings

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 데이터베이스 모듈 임포트
from app.core.config import settings
from app.core.database import engine, get_session, create_db_and_tables, get_async_session_context
from app import API_PREFIX

# 태스크 모듈 임포트
from app.core import tasks as core_tasks
from app.domains.dpm import tasks as dpm_tasks

# 도메인 라우터 임포트
from app.domains.usr.routers import router as usr_router
from app.domains.dpm.routers import router as dpm_router

logger = logging.getLogger(__name__)

# ARQ 워커가 실행할 태스크 함수 목록
worker_functions = [
    core_tasks.health_check_database_task,
    dpm_tasks.seed_mock_data_task,
]


# ARQ 워커 설정 클래스
class ArqWorkerSettings:
    redis_settings = RedisSettings(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    functions = worker_functions
    jobs = [
        {
            'name': 'daily_db_health_check',
            'function': 'app.core.tasks.health_check_database_task',
            'cron': '0 0 * * *',
            'timeout': 300,
            'keep_result': 600,
        },
    ]


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트(데이터베이스, 초기 데이터, ARQ Redis)를 함께 처리합니다.
    """
    logger.info("FastAPI 애플리케이션 시작 중...")
    app.state.redis = None
    try:
        # 1. 테이블 생성
        if settings.AUTO_CREATE_TABLES:
            await create_db_and_tables()

        # 2. 기본 유닛 / 관리자 / 모의 데이터 구성
        if settings.SEED_DEFAULT_DATA or settings.SEED_MOCK_DATA:
            async with get_async_session_context() as db:
                await core_tasks.bootstrap_database(
                    db, seed_defaults=settings.SEED_DEFAULT_DATA, seed_mock=settings.SEED_MOCK_DATA
                )

        # 3. ARQ Redis 커넥션 풀 생성 및 app.state에 할당
        if settings.ARQ_ENABLED:
            logger.info("ARQ Redis 커넥션 풀을 생성합니다...")
            app.state.redis = await create_pool(ArqWorkerSettings.redis_settings)
            logger.info("ARQ Redis 커넥션 풀 생성 완료.")

    except Exception as e:
        logger.error("애플리케이션 시작 중 오류 발생: %s", e)
        raise

    yield  # 애플리케이션 실행

    logger.info("FastAPI 애플리케이션 종료 중...")
    try:
        # 1. ARQ Redis 연결 풀 종료
        if app.state.redis:
            await app.state.redis.close()
            logger.info("ARQ Redis 연결 풀 종료 완료.")

        # 2. 데이터베이스 연결 풀 종료
        await engine.dispose()
        logger.info("데이터베이스 연결 풀 종료 완료.")

    except Exception as e:
        logger.error("애플리케이션 종료 중 오류 발생: %s", e)


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title="DMS API",
    description="Engineering Data Monitoring System (DMS) API for recording, validating, analysing and exporting engineering measurements.",
    version=settings.APP_VERSION,
    docs_url="/docs",       # Swagger UI (Interactive API documentation)
    redoc_url="/redoc",     # ReDoc (Alternative API documentation)
    lifespan=lifespan
)


# -- CORS (Cross-Origin Resource Sharing) 미들웨어 설정 --
# 프로덕션에서는 'allow_origins'를 실제 프론트엔드 도메인으로 제한해야 합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 도메인 라우터 포함 --
app.include_router(usr_router, prefix=f"{API_PREFIX}/usr", tags=["User & Engineering Unit Management (사용자 및 유닛 관리)"])
app.include_router(dpm_router, prefix=f"{API_PREFIX}/dpm", tags=["Data Point Management (측정값 관리)"])


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """
    DMS API의 루트 엔드포인트입니다.
    API의 시작점을 알리고 문서 링크를 제공합니다.
    """
    return {"message": "Welcome to DMS API. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    애플리케이션의 헬스 체크 엔드포인트입니다.
    데이터베이스 연결을 테스트하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.exec(select(1))
        if result.first():
            return {"status": "ok", "database_connection": "successful"}
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database health check failed: No result from test query"
        )
    except HTTPException:
        raise
    except Exception as e:
        # 데이터베이스 연결 중 예외가 발생하면 500 에러를 반환합니다.
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database connection error during health check: {e}"
        )


# -- Uvicorn 서버 직접 실행 (개발용) --
# if __name__ == "__main__":
#     import uvicorn
#     uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
