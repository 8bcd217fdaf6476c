# app/domains/dpm/routers.py

"""
'dpm' 도메인 (측정값 관리)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
모든 엔드포인트는 활성 사용자 인증이 필요합니다.
"""

from typing import List, Optional
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status, Query, Request, Response
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.database import get_session
from app.core import dependencies as deps
from app.domains.usr import models as usr_models

from . import crud as dpm_crud
from . import export as dpm_export
from . import schemas as dpm_schemas
from . import stats as dpm_stats
from . import tasks as dpm_tasks
from .validation import validate_measurement


router = APIRouter(
    tags=["Data Point Management (측정값 관리)"],
    responses={404: {"description": "Not found"}},
)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _check_owner_or_admin(data_point, current_user: usr_models.User) -> None:
    if current_user.role != usr_models.UserRole.ADMIN and data_point.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions to modify other user's data point."
        )


def _export_filename(extension: str) -> str:
    return f"datapoints_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{extension}"


# =============================================================================
# 1. 측정값 (DataPoint) 엔드포인트
# =============================================================================
@router.get("/data_points", response_model=List[dpm_schemas.DataPointReadWithDetails], summary="측정값 목록 조회")
async def read_data_points(
    unit_id: Optional[int] = Query(None, description="엔지니어링 유닛 ID"),
    start: Optional[datetime] = Query(None, description="조회 시작 일시 (포함)"),
    end: Optional[datetime] = Query(None, description="조회 종료 일시 (포함)"),
    parameter_name: Optional[str] = Query(None, description="파라미터명 (부분 일치)"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await dpm_crud.data_point.get_filtered(
        db, unit_id=unit_id, start=start, end=end, parameter_name=parameter_name, skip=skip, limit=limit
    )


@router.post("/data_points", response_model=dpm_schemas.DataPointReadWithDetails, status_code=status.HTTP_201_CREATED, summary="측정값 기록")
async def create_data_point(
    data_point_in: dpm_schemas.DataPointCreate,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """
    측정값을 기록합니다. 기록자는 현재 로그인한 사용자이며,
    유효성 검사 결과(is_valid, validation_message)는 서버에서 계산합니다.
    """
    return await dpm_crud.data_point.create(db, obj_in=data_point_in, user_id=current_user.id)


@router.get("/data_points/recent", response_model=List[dpm_schemas.DataPointReadWithDetails], summary="최근 측정값 조회")
async def read_recent_data_points(
    count: int = Query(50, ge=1, le=1000),
    unit_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await dpm_crud.data_point.get_recent(db, count=count, unit_id=unit_id)


@router.get("/data_points/parameters", response_model=List[str], summary="파라미터명 목록 조회")
async def read_parameter_names(
    unit_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await dpm_crud.data_point.get_parameter_names(db, unit_id=unit_id)


@router.get("/data_points/{data_point_id}", response_model=dpm_schemas.DataPointReadWithDetails, summary="특정 측정값 조회")
async def read_data_point(
    data_point_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await dpm_crud.data_point.get_or_404(db, id=data_point_id)


@router.put("/data_points/{data_point_id}", response_model=dpm_schemas.DataPointReadWithDetails, summary="측정값 수정")
async def update_data_point(
    data_point_id: int,
    data_point_in: dpm_schemas.DataPointUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """측정값을 수정합니다. 기록자 본인 또는 관리자만 수정할 수 있습니다."""
    db_data_point = await dpm_crud.data_point.get_or_404(db, id=data_point_id)
    _check_owner_or_admin(db_data_point, current_user)
    return await dpm_crud.data_point.update(db, db_obj=db_data_point, obj_in=data_point_in)


@router.delete("/data_points/{data_point_id}", status_code=status.HTTP_204_NO_CONTENT, summary="측정값 삭제")
async def delete_data_point(
    data_point_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    db_data_point = await dpm_crud.data_point.get_or_404(db, id=data_point_id)
    _check_owner_or_admin(db_data_point, current_user)
    await dpm_crud.data_point.remove(db, id=data_point_id)
    return None


# =============================================================================
# 2. 유효성 검사 / 통계 / 차트 엔드포인트
# =============================================================================
@router.post("/validate", response_model=dpm_schemas.ValidationResponse, summary="측정값 유효성 검사 (저장하지 않음)")
async def validate_data_point(
    request: dpm_schemas.ValidationRequest,
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    result = validate_measurement(
        request.parameter_name, request.value, request.unit,
        min_value=request.min_value, max_value=request.max_value,
    )
    return dpm_schemas.ValidationResponse(is_valid=result.is_valid, message=result.message)


@router.get("/stats", response_model=dpm_schemas.DashboardStats, summary="대시보드 통계")
async def read_dashboard_stats(
    unit_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await dpm_stats.get_dashboard_stats(db, unit_id=unit_id)


@router.get("/charts", response_model=dpm_schemas.ChartSeries, summary="대시보드 차트 데이터")
async def read_chart_series(
    parameter_name: Optional[str] = Query(None, description="추이 차트를 그릴 파라미터명"),
    unit_id: Optional[int] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await dpm_stats.get_chart_series(
        db, parameter_name=parameter_name, unit_id=unit_id, start=start, end=end
    )


# =============================================================================
# 3. 내보내기 (Export) 엔드포인트
# =============================================================================
@router.get("/export/csv", summary="측정값 CSV 내보내기")
async def export_csv(
    unit_id: Optional[int] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    parameter_name: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    data_points = await dpm_crud.data_point.get_filtered(
        db, unit_id=unit_id, start=start, end=end, parameter_name=parameter_name
    )
    content = dpm_export.export_to_csv(dpm_export.to_export_row(dp) for dp in data_points)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={_export_filename('csv')}"},
    )


@router.get("/export/excel", summary="측정값 Excel 내보내기")
async def export_excel(
    unit_id: Optional[int] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    parameter_name: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    data_points = await dpm_crud.data_point.get_filtered(
        db, unit_id=unit_id, start=start, end=end, parameter_name=parameter_name
    )
    content = dpm_export.export_to_excel(dpm_export.to_export_row(dp) for dp in data_points)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={_export_filename('xlsx')}"},
    )


# =============================================================================
# 4. 모의 데이터 생성 엔드포인트
# =============================================================================
@router.post("/seed", response_model=dpm_schemas.SeedResult, summary="모의 측정 데이터 생성")
async def seed_mock_data(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    """
    측정값이 하나도 없을 때만 최근 30일치 모의 데이터를 생성합니다.
    ARQ 연결 풀이 있으면 워커 작업으로 예약하고 202를 반환하며, 없으면 요청 안에서 바로 생성합니다.
    """
    arq_redis_pool = getattr(request.app.state, "redis", None)
    if arq_redis_pool:
        await arq_redis_pool.enqueue_job("seed_mock_data_task")
        response.status_code = status.HTTP_202_ACCEPTED
        return dpm_schemas.SeedResult(created=0, queued=True)

    created = await dpm_tasks.seed_mock_data(db)
    return dpm_schemas.SeedResult(created=created)
