# app/domains/usr/routers.py

"""
'usr' 도메인 (엔지니어링 유닛 및 사용자 관리)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import List, Optional
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel.ext.asyncio.session import AsyncSession

# 애플리케이션 설정 및 의존성 임포트
from app.core.config import settings
from app.core.database import get_session
from app.core import dependencies as deps

# usr 도메인의 CRUD, 모델, 스키마
from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas


# 라우터 인스턴스 생성 (prefix는 main.py에서 관리)
router = APIRouter(
    tags=["User & Engineering Unit Management (사용자 및 유닛 관리)"],
    responses={404: {"description": "Not found"}},
)

# 로그인 결과별 HTTP 응답 (상태 코드, 메시지)
SIGN_IN_ERRORS = {
    usr_models.SignInResult.INVALID_CREDENTIALS: (status.HTTP_401_UNAUTHORIZED, "Incorrect email or password"),
    usr_models.SignInResult.LOCKED_OUT: (status.HTTP_403_FORBIDDEN, "Account is locked out"),
    usr_models.SignInResult.NOT_ALLOWED: (status.HTTP_403_FORBIDDEN, "Login not allowed"),
    usr_models.SignInResult.REQUIRES_TWO_FACTOR: (status.HTTP_403_FORBIDDEN, "Two-factor authentication required"),
}


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트
# =============================================================================

@router.post("/auth/token", response_model=usr_schemas.Token, summary="Access Token 획득")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session),
):
    """OAuth2 password 폼의 username 필드에 이메일을 입력합니다."""
    result, user = await usr_crud.user.sign_in(db, email=form_data.username, password=form_data.password)
    if result != usr_models.SignInResult.SUCCESS:
        status_code, detail = SIGN_IN_ERRORS[result]
        headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
        raise HTTPException(status_code=status_code, detail=detail, headers=headers)

    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = deps.create_access_token(data={"sub": user.email}, expires_delta=access_token_expires)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/auth/me", response_model=usr_schemas.UserRead, summary="현재 사용자 정보 조회")
async def read_users_me(current_user: usr_models.User = Depends(deps.get_current_active_user)):
    return current_user


# =============================================================================
# 2. 엔지니어링 유닛 (EngineeringUnit) 관리 엔드포인트
# =============================================================================

@router.post("/units", response_model=usr_schemas.EngineeringUnitRead, status_code=status.HTTP_201_CREATED, summary="새 유닛 생성")
async def create_unit(
    unit_in: usr_schemas.EngineeringUnitCreate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.unit.create(db, obj_in=unit_in)


@router.get("/units", response_model=List[usr_schemas.EngineeringUnitRead], summary="모든 유닛 조회")
async def read_units(
    db: AsyncSession = Depends(get_session),
    active_only: bool = Query(False, description="활성 유닛만 조회"),
):
    return await usr_crud.unit.get_all(db, active_only=active_only)


@router.get("/units/by-code/{code}", response_model=usr_schemas.EngineeringUnitRead, summary="코드로 유닛 조회")
async def read_unit_by_code(
    code: str,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    db_unit = await usr_crud.unit.get_by_code(db, code=code)
    if not db_unit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Engineering Unit with code '{code}' not found.")
    return db_unit


@router.get("/units/{unit_id}", response_model=usr_schemas.EngineeringUnitRead, summary="특정 유닛 조회")
async def read_unit(
    unit_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    return await usr_crud.unit.get_or_404(db, id=unit_id)


@router.put("/units/{unit_id}", response_model=usr_schemas.EngineeringUnitRead, summary="유닛 업데이트")
async def update_unit(
    unit_id: int,
    unit_in: usr_schemas.EngineeringUnitUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    db_unit = await usr_crud.unit.get_or_404(db, id=unit_id)
    return await usr_crud.unit.update(db, db_obj=db_unit, obj_in=unit_in)


@router.delete("/units/{unit_id}", status_code=status.HTTP_204_NO_CONTENT, summary="유닛 삭제")
async def delete_unit(
    unit_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    """
    유닛을 삭제합니다. 측정값이나 사용자가 참조 중인 유닛은 비활성화됩니다.
    """
    if not await usr_crud.unit.remove(db, id=unit_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Engineering Unit with ID {unit_id} not found.")
    return None


# =============================================================================
# 3. 사용자 (User) 관리 엔드포인트
# =============================================================================
@router.post("/users", response_model=usr_schemas.UserRead, status_code=status.HTTP_201_CREATED, summary="새 사용자 생성")
async def create_user(
    user: usr_schemas.UserCreate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    return await usr_crud.user.create(db, obj_in=user)


@router.get("/users", response_model=List[usr_schemas.UserRead], summary="모든 사용자 조회")
async def read_users(
    db: AsyncSession = Depends(get_session),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1),
    unit_id: Optional[int] = Query(None, description="유닛 ID로 필터링"),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """
    사용자 목록을 조회합니다.
    - 관리자는 모든 사용자를 조회할 수 있습니다.
    - 그 외 사용자는 자신의 정보만 조회합니다.
    """
    if current_user.role != usr_models.UserRole.ADMIN:
        return [current_user]

    filters = {"unit_id": unit_id} if unit_id is not None else {}
    return await usr_crud.user.get_multi(db, skip=skip, limit=limit, **filters)


@router.get("/users/{user_id}", response_model=usr_schemas.UserRead, summary="특정 사용자 조회")
async def read_user(
    user_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: usr_models.User = Depends(deps.get_current_active_user),
):
    """
    ID로 특정 사용자 정보를 조회합니다.
    관리자가 아니면 자신의 정보만 조회할 수 있습니다.
    """
    user = await usr_crud.user.get(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if current_user.role != usr_models.UserRole.ADMIN and user.id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions to view other user's information."
        )
    return user


@router.put("/users/{user_id}", response_model=usr_schemas.UserRead, summary="사용자 업데이트")
async def update_user(
    user_id: int,
    user_in: usr_schemas.UserUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    db_user = await usr_crud.user.get(db, user_id)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return await usr_crud.user.update(db, db_obj=db_user, obj_in=user_in)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="사용자 삭제")
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_models.User = Depends(deps.get_current_admin_user),
):
    """
    ID로 사용자를 삭제합니다. 사용자가 기록한 측정값도 함께 삭제됩니다.
    """
    if user_id == current_admin_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account.")

    await usr_crud.user.remove(db, id=user_id)
    return None
