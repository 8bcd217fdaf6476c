# app/domains/usr/models.py

"""
'usr' 도메인 (PostgreSQL 'usr' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

이 모듈은 'usr' 스키마에 속하는 모든 테이블 (engineering_units, users)에 대한 SQLModel 클래스를 포함합니다.
각 클래스는 해당 테이블의 구조와 컬럼을 Python 객체로 매핑하며,
SQLModel의 Field 및 Relationship을 사용하여 데이터베이스 제약 조건 및 관계를 정의합니다.
"""

from typing import Optional, List, TYPE_CHECKING
from datetime import datetime, UTC
from enum import Enum, IntEnum

from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

# 다른 도메인의 모델을 참조해야 할 경우
# TYPE_CHECKING을 사용하여 순환 임포트 문제를 방지합니다.
if TYPE_CHECKING:
    from app.domains.dpm.models import DataPoint


# =============================================================================
# 사용자 역할(RBAC) 및 로그인 결과 Enum
# =============================================================================
class UserRole(IntEnum):
    """
    사용자 역할을 정의하는 정수형 Enum 클래스입니다.
    DB에는 정수 값으로 저장되지만, 코드에서는 명시적인 역할 이름으로 사용할 수 있습니다.
    """
    ADMIN = 10              # 시스템 관리자
    ENGINEER = 50           # 엔지니어 (측정값 입력)
    GENERAL_USER = 100      # 일반 사용자 (조회)


class SignInResult(str, Enum):
    """
    로그인 시도의 결과입니다. 라우터는 이 값에 따라 응답을 결정합니다.
    """
    SUCCESS = "success"
    LOCKED_OUT = "locked_out"
    NOT_ALLOWED = "not_allowed"
    REQUIRES_TWO_FACTOR = "requires_two_factor"
    INVALID_CREDENTIALS = "invalid_credentials"


# =============================================================================
# 1. usr.engineering_units 테이블 모델
# =============================================================================
class EngineeringUnitBase(SQLModel):
    """
    usr.engineering_units 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="엔지니어링 유닛 고유 ID")
    name: str = Field(max_length=100, description="유닛명")
    description: Optional[str] = Field(default=None, max_length=500, description="설명")
    code: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="유닛 코드 (예: PROC-A, QC-LAB)")
    is_active: bool = Field(default=True, description="활성 여부 - 소프트 삭제시 False")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )


class EngineeringUnit(EngineeringUnitBase, table=True):
    """
    usr.engineering_units 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "engineering_units"
    __table_args__ = {'schema': 'usr'}

    users: List["User"] = Relationship(back_populates="engineering_unit")
    data_points: List["DataPoint"] = Relationship(
        back_populates="engineering_unit",
        sa_relationship_kwargs={'cascade': 'all, delete'}
    )


# =============================================================================
# 2. usr.users 테이블 모델
# =============================================================================
class UserBase(SQLModel):
    """
    usr.users 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="사용자 고유 ID")
    email: str = Field(max_length=256, sa_column_kwargs={"unique": True}, description="로그인 이메일")
    password_hash: str = Field(max_length=255, description="해싱된 비밀번호")
    first_name: str = Field(max_length=100, description="이름")
    last_name: str = Field(max_length=100, description="성")
    department: Optional[str] = Field(default=None, max_length=100, description="부서명")
    job_title: Optional[str] = Field(default=None, max_length=100, description="직함")
    role: UserRole = Field(default=UserRole.GENERAL_USER, description="사용자 역할 (권한)")
    is_active: bool = Field(default=True, description="계정 활성 여부")

    # 로그인 정책 관련 필드
    two_factor_enabled: bool = Field(default=False, description="2단계 인증 사용 여부")
    access_failed_count: int = Field(default=0, description="연속 로그인 실패 횟수")
    lockout_end: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="계정 잠금 해제 일시"
    )

    unit_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            ForeignKey("usr.engineering_units.id", ondelete="SET NULL"),
            nullable=True,
        ),
        description="소속 엔지니어링 유닛 ID (FK)"
    )

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    last_login_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="마지막 로그인 일시"
    )


class User(UserBase, table=True):
    """
    usr.users 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "users"
    __table_args__ = {'schema': 'usr'}

    engineering_unit: Optional["EngineeringUnit"] = Relationship(
        back_populates="users",
        sa_relationship_kwargs={"foreign_keys": "User.unit_id"}
    )
    data_points: List["DataPoint"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={'cascade': 'all, delete'}
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
