# app/domains/dpm/stats.py

"""
대시보드 통계 및 차트 데이터 집계 모듈입니다.
모든 집계는 DB에서 수행되며, unit_id 가 주어지면 해당 유닛의 측정값만 대상으로 합니다.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.utils.dates import ensure_utc, utc_now
from . import models as dpm_models
from . import schemas as dpm_schemas

# 상위 파라미터 개수
TOP_PARAMETER_COUNT = 5
# '최근' 측정값 기준 시간
RECENT_WINDOW = timedelta(hours=24)

DataPoint = dpm_models.DataPoint


def _scope(statement, unit_id: Optional[int], start: Optional[datetime] = None, end: Optional[datetime] = None):
    if unit_id is not None:
        statement = statement.where(DataPoint.unit_id == unit_id)
    if start is not None:
        statement = statement.where(DataPoint.timestamp >= ensure_utc(start))
    if end is not None:
        statement = statement.where(DataPoint.timestamp <= ensure_utc(end))
    return statement


def validation_rate(total: int, valid: int) -> float:
    """유효 비율(%)을 소수점 둘째 자리까지 반환합니다. 측정값이 없으면 0.0 입니다."""
    if total <= 0:
        return 0.0
    return round(valid / total * 100, 2)


async def _count(db: AsyncSession, statement) -> int:
    result = await db.execute(statement)
    return result.scalar_one() or 0


async def get_dashboard_stats(
    db: AsyncSession, *, unit_id: Optional[int] = None, now: Optional[datetime] = None
) -> dpm_schemas.DashboardStats:
    """
    대시보드 통계를 계산합니다.

    - total / valid / invalid: 전체, 유효, 무효 측정값 개수
    - recent: now 기준 최근 24시간 이내 측정값 개수
    - top_parameters: 측정 횟수 상위 5개 파라미터 (동률이면 파라미터명 오름차순)
    - validation_rate: 유효 비율(%)
    """
    now = ensure_utc(now) if now else utc_now()
    count_stmt = select(func.count(DataPoint.id))

    total = await _count(db, _scope(count_stmt, unit_id))
    valid = await _count(db, _scope(count_stmt.where(DataPoint.is_valid == True), unit_id))  # noqa: E712
    recent = await _count(db, _scope(count_stmt, unit_id, start=now - RECENT_WINDOW))

    count_col = func.count(DataPoint.id).label("count")
    top_stmt = (
        _scope(select(DataPoint.parameter_name, count_col), unit_id)
        .group_by(DataPoint.parameter_name)
        .order_by(count_col.desc(), DataPoint.parameter_name)
        .limit(TOP_PARAMETER_COUNT)
    )
    top_rows = (await db.execute(top_stmt)).all()

    return dpm_schemas.DashboardStats(
        total_data_points=total,
        valid_data_points=valid,
        invalid_data_points=total - valid,
        recent_data_points=recent,
        top_parameters=[dpm_schemas.ParameterCount(parameter=name, count=count) for name, count in top_rows],
        validation_rate=validation_rate(total, valid),
    )


async def get_chart_series(
    db: AsyncSession,
    *,
    parameter_name: Optional[str] = None,
    unit_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> dpm_schemas.ChartSeries:
    """
    대시보드 차트용 데이터를 반환합니다.

    - trend: parameter_name 의 측정값 추이 (오래된 순). parameter_name 이 없으면 빈 목록
    - averages / distribution: 파라미터별 평균값 / 측정 횟수 (파라미터명 순)
    - validity: 유효/무효 개수
    """
    trend: List[dpm_schemas.ChartPoint] = []
    if parameter_name:
        trend_stmt = (
            _scope(select(DataPoint.timestamp, DataPoint.value), unit_id, start, end)
            .where(DataPoint.parameter_name == parameter_name)
            .order_by(DataPoint.timestamp, DataPoint.id)
        )
        trend = [
            dpm_schemas.ChartPoint(x=ensure_utc(ts), y=float(value))
            for ts, value in (await db.execute(trend_stmt)).all()
        ]

    group_stmt = (
        _scope(
            select(DataPoint.parameter_name, func.avg(DataPoint.value), func.count(DataPoint.id)),
            unit_id, start, end,
        )
        .group_by(DataPoint.parameter_name)
        .order_by(DataPoint.parameter_name)
    )
    groups = (await db.execute(group_stmt)).all()

    count_stmt = select(func.count(DataPoint.id))
    total = await _count(db, _scope(count_stmt, unit_id, start, end))
    valid = await _count(db, _scope(count_stmt.where(DataPoint.is_valid == True), unit_id, start, end))  # noqa: E712

    return dpm_schemas.ChartSeries(
        trend=trend,
        averages=[dpm_schemas.LabelValue(label=name, value=round(float(avg), 4)) for name, avg, _ in groups],
        distribution=[dpm_schemas.LabelValue(label=name, value=count) for name, _, count in groups],
        validity=[
            dpm_schemas.LabelValue(label="Valid", value=valid),
            dpm_schemas.LabelValue(label="Invalid", value=total - valid),
        ],
    )
