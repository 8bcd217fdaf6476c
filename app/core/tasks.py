# app/core/tasks.py

"""
도메인에 속하지 않는 공통 작업 모듈입니다.

- 데이터베이스 헬스 체크 (ARQ cron 작업)
- 초기 데이터 구성 (기본 엔지니어링 유닛, 기본 관리자, 모의 측정 데이터)
"""

import logging
from typing import Any, Dict

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import get_async_session_context

#  로거 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def health_check_database_task(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """
    ARQ 워커에 의해 실행될 주기적인 데이터베이스 헬스 체크 태스크.
    데이터베이스 연결 상태를 확인하고 로그를 남깁니다.
    """
    logger.info("ARQ 태스크: 데이터베이스 헬스 체크 실행!")

    try:
        async with get_async_session_context() as db:
            result = await db.execute(select(1))
            if result.scalar_one_or_none() == 1:
                logger.info("데이터베이스 헬스 체크: 성공적으로 연결되었습니다.")
                return {"status": "success", "message": "Database connection successful."}
            error_msg = "Database health check failed: No result from test query."
            logger.error("데이터베이스 헬스 체크: 실패 - %s", error_msg)
            return {"status": "failed", "message": error_msg}
    except Exception as e:
        error_msg = f"데이터베이스 연결 오류: {e}"
        logger.error("데이터베이스 헬스 체크: 실패 - %s", error_msg)
        return {"status": "failed", "message": error_msg}


async def bootstrap_database(db: AsyncSession, *, seed_defaults: bool = True, seed_mock: bool = False) -> Dict[str, int]:
    """
    초기 데이터를 구성합니다.
    1. 유닛이 없으면 기본 엔지니어링 유닛 4개 생성
    2. 사용자가 없으면 기본 관리자 생성
    3. seed_mock 이 True 이면 모의 측정 데이터 생성
    """
    from app.domains.usr import crud as usr_crud
    from app.domains.dpm import tasks as dpm_tasks

    summary = {"units": 0, "admins": 0, "data_points": 0}
    if seed_defaults:
        summary["units"] = await usr_crud.unit.seed_defaults(db)
        summary["admins"] = 1 if await usr_crud.user.ensure_admin(db) else 0
    if seed_mock:
        summary["data_points"] = await dpm_tasks.seed_mock_data(db)
    logger.info("초기 데이터 구성 완료: %s", summary)
    return summary
