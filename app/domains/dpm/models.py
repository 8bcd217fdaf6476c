# app/domains/dpm/models.py

"""
'dpm' 도메인 (PostgreSQL 'dpm' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
"""

from typing import Optional, TYPE_CHECKING
from datetime import datetime, UTC
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric
from sqlalchemy.types import TIMESTAMP
from sqlmodel import Field, Relationship, SQLModel, Column

if TYPE_CHECKING:
    from app.domains.usr.models import User, EngineeringUnit


# =============================================================================
# 1. dpm.data_points 테이블 모델
# =============================================================================
class DataPointBase(SQLModel):
    parameter_name: str = Field(max_length=100, index=True, description="측정 파라미터명 (예: Temperature, Pressure)")
    value: Decimal = Field(sa_column=Column(Numeric(18, 4), nullable=False), description="측정값")
    unit: str = Field(max_length=20, description="측정 단위 (예: °C, bar)")
    notes: Optional[str] = Field(default=None, max_length=500, description="비고")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), nullable=False, index=True),
        description="측정 일시"
    )
    min_value: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(18, 4)), description="허용 최소값")
    max_value: Optional[Decimal] = Field(default=None, sa_column=Column(Numeric(18, 4)), description="허용 최대값")

    # 검증 결과 - 항상 validation.validate_measurement 결과로 채워집니다.
    is_valid: bool = Field(default=True, description="유효성 검사 통과 여부")
    validation_message: Optional[str] = Field(default=None, max_length=200, description="유효성 검사 메시지")


class DataPoint(DataPointBase, table=True):
    __tablename__ = "data_points"
    __table_args__ = {'schema': 'dpm'}

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(ForeignKey("usr.users.id", ondelete="CASCADE"), nullable=False, index=True),
        description="기록한 사용자 ID (FK)"
    )
    unit_id: int = Field(
        sa_column=Column(ForeignKey("usr.engineering_units.id", ondelete="CASCADE"), nullable=False, index=True),
        description="엔지니어링 유닛 ID (FK)"
    )

    # --- 관계 정의 ---
    user: Optional["User"] = Relationship(back_populates="data_points")
    engineering_unit: Optional["EngineeringUnit"] = Relationship(back_populates="data_points")
