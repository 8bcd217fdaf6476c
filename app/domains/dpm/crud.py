# app/domains/dpm/crud.py

"""
'dpm' 도메인의 측정값 저장소(CRUD) 모듈입니다.

- 생성/수정 시마다 validation.validate_measurement 로 유효성 결과를 다시 계산합니다.
- 조회 결과에는 기록자(user)와 엔지니어링 유닛(engineering_unit)이 함께 로딩됩니다.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import HTTPException, status

from app.core.crud_base import CRUDBase
from app.utils.dates import ensure_utc, utc_now
from app.domains.usr import models as usr_models
from . import models as dpm_models
from . import schemas as dpm_schemas
from .validation import validate_measurement

logger = logging.getLogger(__name__)

# dpm.data_points.validation_message 컬럼 길이
VALIDATION_MESSAGE_MAX_LENGTH = 200


def apply_validation(db_obj: dpm_models.DataPoint) -> dpm_models.DataPoint:
    """측정값 객체의 is_valid / validation_message 를 현재 값 기준으로 채웁니다."""
    result = validate_measurement(
        db_obj.parameter_name, db_obj.value, db_obj.unit,
        min_value=db_obj.min_value, max_value=db_obj.max_value,
    )
    db_obj.is_valid = result.is_valid
    db_obj.validation_message = result.message[:VALIDATION_MESSAGE_MAX_LENGTH] if result.message else None
    return db_obj


class CRUDDataPoint(CRUDBase[dpm_models.DataPoint, dpm_schemas.DataPointCreate, dpm_schemas.DataPointUpdate]):
    def __init__(self):
        super().__init__(model=dpm_models.DataPoint)

    def _with_details(self, statement):
        return statement.options(
            selectinload(self.model.user),
            selectinload(self.model.engineering_unit),
        )

    def _filtered(
        self,
        statement,
        *,
        unit_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        parameter_name: Optional[str] = None,
    ):
        if unit_id is not None:
            statement = statement.where(self.model.unit_id == unit_id)
        if start is not None:
            statement = statement.where(self.model.timestamp >= ensure_utc(start))
        if end is not None:
            statement = statement.where(self.model.timestamp <= ensure_utc(end))
        if parameter_name:
            statement = statement.where(self.model.parameter_name.contains(parameter_name))
        return statement

    async def get_with_details(self, db: AsyncSession, *, id: int) -> Optional[dpm_models.DataPoint]:
        statement = self._with_details(select(self.model).where(self.model.id == id))
        result = await db.execute(statement.execution_options(populate_existing=True))
        return result.scalars().first()

    async def get_or_404(self, db: AsyncSession, *, id: int) -> dpm_models.DataPoint:
        db_obj = await self.get_with_details(db, id=id)
        if not db_obj:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"DataPoint with ID {id} not found.")
        return db_obj

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        unit_id: Optional[int] = None,
        start: Optional[datetime] = None,    # 시작 일시 (포함)
        end: Optional[datetime] = None,      # 종료 일시 (포함)
        parameter_name: Optional[str] = None,  # 파라미터명 부분 일치
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[dpm_models.DataPoint]:
        """
        측정값 다중 조회 (유닛, 기간, 파라미터명 검색 기능 포함).
        최신 측정값이 먼저 오도록 정렬합니다.
        """
        statement = self._filtered(
            select(self.model), unit_id=unit_id, start=start, end=end, parameter_name=parameter_name
        )
        statement = self._with_details(statement).order_by(self.model.timestamp.desc(), self.model.id.desc())
        if skip:
            statement = statement.offset(skip)
        if limit is not None:
            statement = statement.limit(limit)
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def get_recent(
        self, db: AsyncSession, *, count: int = 50, unit_id: Optional[int] = None
    ) -> List[dpm_models.DataPoint]:
        """최근 측정값을 count 개까지 조회합니다."""
        return await self.get_filtered(db, unit_id=unit_id, limit=count)

    async def get_parameter_names(self, db: AsyncSession, *, unit_id: Optional[int] = None) -> List[str]:
        """측정된 파라미터명 목록을 중복 없이 알파벳순으로 반환합니다."""
        statement = select(self.model.parameter_name).distinct()
        if unit_id is not None:
            statement = statement.where(self.model.unit_id == unit_id)
        result = await db.execute(statement.order_by(self.model.parameter_name))
        return list(result.scalars().all())

    async def create(
        self, db: AsyncSession, *, obj_in: dpm_schemas.DataPointCreate, user_id: int
    ) -> dpm_models.DataPoint:
        """
        측정값을 생성합니다. 이 과정에서 다음을 수행합니다:
        - 기록자(user_id)와 엔지니어링 유닛(unit_id)이 존재하는지 확인합니다.
        - timestamp 가 없으면 현재 시각(UTC)으로 설정합니다.
        - 유효성 검사 결과를 채웁니다.
        """
        if not await db.get(usr_models.User, user_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        if not await db.get(usr_models.EngineeringUnit, obj_in.unit_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Engineering Unit with ID {obj_in.unit_id} not found."
            )

        data = obj_in.model_dump(exclude={"timestamp"})
        db_obj = self.model(
            **data,
            user_id=user_id,
            timestamp=ensure_utc(obj_in.timestamp) if obj_in.timestamp else utc_now(),
        )
        apply_validation(db_obj)

        db.add(db_obj)
        await db.commit()
        logger.debug("DataPoint %s created (valid=%s).", db_obj.id, db_obj.is_valid)
        return await self.get_or_404(db, id=db_obj.id)

    async def update(
        self, db: AsyncSession, *, db_obj: dpm_models.DataPoint, obj_in: dpm_schemas.DataPointUpdate
    ) -> dpm_models.DataPoint:
        """측정값을 전체 교체 방식으로 수정하고 유효성 검사를 다시 수행합니다."""
        for key, value in obj_in.model_dump().items():
            setattr(db_obj, key, value)
        apply_validation(db_obj)

        db.add(db_obj)
        await db.commit()
        return await self.get_or_404(db, id=db_obj.id)

    async def remove(self, db: AsyncSession, *, id: int) -> bool:
        """측정값을 삭제합니다. 삭제할 행이 없으면 False를 반환합니다."""
        return await self.delete(db, id=id) is not None


data_point = CRUDDataPoint()
