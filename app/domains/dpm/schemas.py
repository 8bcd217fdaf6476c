# app/domains/dpm/schemas.py

"""
'dpm' 도메인 (측정값 관리)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import List, Optional
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from pydantic import field_validator
from sqlmodel import SQLModel, Field

from app.domains.usr import schemas as usr_schemas

# Numeric(18, 4): 정수부 14자리, 소수부 4자리
VALUE_SCALE = Decimal("0.0001")
MAX_INTEGER_DIGITS = 14


# =============================================================================
# 1. 측정값 (DataPoint) 스키마
# =============================================================================
class DataPointBase(SQLModel):
    parameter_name: str = Field(..., min_length=1, max_length=100)
    value: Decimal
    unit: str = Field(..., max_length=20)
    notes: Optional[str] = Field(None, max_length=500)
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None

    @field_validator("value", "min_value", "max_value")
    @classmethod
    def round_to_column_scale(cls, value: Optional[Decimal]) -> Optional[Decimal]:
        """
        dpm.data_points 의 Numeric(18, 4) 컬럼에 맞게 소수점 다섯째 자리 이하를 반올림합니다.
        소수부가 4자리 이하인 값은 입력 그대로 유지됩니다.
        """
        if value is None:
            return None
        if not value.is_finite() or value.adjusted() >= MAX_INTEGER_DIGITS:
            raise ValueError(f"Value must be finite with at most {MAX_INTEGER_DIGITS} digits before the decimal point")
        if value.as_tuple().exponent < VALUE_SCALE.as_tuple().exponent:
            value = value.quantize(VALUE_SCALE, rounding=ROUND_HALF_UP)
            if value.adjusted() >= MAX_INTEGER_DIGITS:
                raise ValueError(f"Value must have at most {MAX_INTEGER_DIGITS} digits before the decimal point")
        return value


class DataPointCreate(DataPointBase):
    """
    측정값 생성 스키마. 기록자는 로그인한 사용자로 지정되며,
    is_valid / validation_message 는 서버에서 계산합니다.
    """
    unit_id: int
    timestamp: Optional[datetime] = Field(None, description="측정 일시 (생략 시 현재 시각)")


class DataPointUpdate(DataPointBase):
    """측정값 수정 스키마. 파라미터/값/단위/비고/최소/최대 전체를 교체합니다."""
    pass


class DataPointRead(SQLModel):
    id: int
    parameter_name: str
    value: float
    unit: str
    notes: Optional[str] = None
    timestamp: datetime
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    is_valid: bool
    validation_message: Optional[str] = None
    user_id: int
    unit_id: int


class DataPointReadWithDetails(DataPointRead):
    """기록자와 엔지니어링 유닛 정보를 함께 반환하는 스키마"""
    user: Optional[usr_schemas.UserSummary] = None
    engineering_unit: Optional[usr_schemas.EngineeringUnitSummary] = None


# =============================================================================
# 2. 유효성 검사 (Validation) 스키마
# =============================================================================
class ValidationRequest(SQLModel):
    parameter_name: str
    value: Decimal
    unit: str
    min_value: Optional[Decimal] = None
    max_value: Optional[Decimal] = None


class ValidationResponse(SQLModel):
    is_valid: bool
    message: Optional[str] = None


# =============================================================================
# 3. 대시보드 통계 / 차트 스키마
# =============================================================================
class ParameterCount(SQLModel):
    parameter: str
    count: int


class DashboardStats(SQLModel):
    total_data_points: int
    valid_data_points: int
    invalid_data_points: int
    recent_data_points: int
    top_parameters: List[ParameterCount]
    validation_rate: float


class ChartPoint(SQLModel):
    x: datetime
    y: float


class LabelValue(SQLModel):
    label: str
    value: float


class ChartSeries(SQLModel):
    trend: List[ChartPoint]
    averages: List[LabelValue]
    distribution: List[LabelValue]
    validity: List[LabelValue]


# =============================================================================
# 4. 모의 데이터 생성 결과
# =============================================================================
class SeedResult(SQLModel):
    created: int
    queued: bool = False  # ARQ 워커 작업으로 예약된 경우 True
