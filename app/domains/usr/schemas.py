# app/domains/usr/schemas.py

"""
'usr' 도메인 (엔지니어링 유닛 및 사용자 관리)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import BaseModel, EmailStr, field_validator

from . import models as usr_models


# =============================================================================
# 1. 엔지니어링 유닛 (EngineeringUnit) 스키마
# =============================================================================
class EngineeringUnitBase(SQLModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    code: str = Field(..., min_length=1, max_length=50)
    is_active: bool = True


class EngineeringUnitCreate(EngineeringUnitBase):
    pass


class EngineeringUnitUpdate(SQLModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    code: Optional[str] = Field(None, min_length=1, max_length=50)
    is_active: Optional[bool] = None

    @field_validator("name", "code", "is_active")
    @classmethod
    def reject_null(cls, value):
        # 생략은 허용하지만 NOT NULL 컬럼에 명시적 null 은 허용하지 않습니다.
        if value is None:
            raise ValueError("null is not allowed for this field")
        return value


class EngineeringUnitRead(EngineeringUnitBase):
    id: int
    created_at: Optional[datetime] = Field(None, description="레코드 생성 일시")


class EngineeringUnitSummary(SQLModel):
    """다른 응답에 포함되는 유닛 요약 정보"""
    id: int
    name: str
    code: str


# =============================================================================
# 2. 사용자 (User) 스키마
# =============================================================================
class UserBase(SQLModel):
    """사용자 정보의 기본 필드를 정의하는 스키마"""
    email: EmailStr = Field(..., max_length=256)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    job_title: Optional[str] = Field(None, max_length=100)
    role: usr_models.UserRole = Field(default=usr_models.UserRole.GENERAL_USER, description="사용자 역할")
    is_active: bool = True
    two_factor_enabled: bool = False
    unit_id: Optional[int] = None


class UserCreate(UserBase):
    """사용자 생성을 위한 스키마"""
    password: str = Field(..., min_length=8)


class UserUpdate(SQLModel):
    """사용자 정보 수정을 위한 스키마"""
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    department: Optional[str] = Field(None, max_length=100)
    job_title: Optional[str] = Field(None, max_length=100)
    role: Optional[usr_models.UserRole] = None
    is_active: Optional[bool] = None
    two_factor_enabled: Optional[bool] = None
    unit_id: Optional[int] = None

    @field_validator("first_name", "last_name", "role", "is_active", "two_factor_enabled")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("null is not allowed for this field")
        return value


class UserRead(UserBase):
    """
    사용자 정보 조회를 위한 기본 스키마.
    비밀번호 해시값 등 민감한 정보는 제외됩니다.
    """
    id: int
    full_name: str
    created_at: Optional[datetime] = Field(None, description="레코드 생성 일시")
    last_login_at: Optional[datetime] = Field(None, description="마지막 로그인 일시")


class UserSummary(SQLModel):
    """다른 응답에 포함되는 사용자 요약 정보"""
    id: int
    email: str
    full_name: str


# =============================================================================
# 3. 인증 토큰 (Token) 스키마
# =============================================================================
class Token(BaseModel):
    """JWT 토큰 응답 스키마"""
    access_token: str
    token_type: str


class TokenData(BaseModel):
    """JWT 토큰에 담길 데이터 스키마"""
    email: Optional[str] = None
