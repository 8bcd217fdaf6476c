# app/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업을 담당하는 모듈입니다.
엔지니어링 유닛 디렉토리와 사용자 디렉토리, 로그인 결과 판정을 포함합니다.
"""

import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import HTTPException, status

from app.core.config import settings
from app.core.crud_base import CRUDBase
from app.core.security import get_password_hash, verify_password
from app.utils.dates import ensure_utc, utc_now
from app.domains.dpm import models as dpm_models
from . import models as usr_models
from . import schemas as usr_schemas

logger = logging.getLogger(__name__)


# 초기 엔지니어링 유닛 (code, name, description)
DEFAULT_UNITS = [
    ("PROC-A", "Process Engineering Unit A", "Primary process control and monitoring unit"),
    ("QC-LAB", "Quality Control Lab", "Quality assurance and testing laboratory"),
    ("MAINT", "Maintenance Department", "Equipment maintenance and reliability"),
    ("SAFE-ENV", "Safety & Environmental", "Safety monitoring and environmental compliance"),
]


# =============================================================================
# 1. usr.engineering_units 테이블 CRUD
# =============================================================================
class CRUDEngineeringUnit(CRUDBase[usr_models.EngineeringUnit, usr_schemas.EngineeringUnitCreate, usr_schemas.EngineeringUnitUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.EngineeringUnit)

    async def get_by_code(self, db: AsyncSession, *, code: str) -> Optional[usr_models.EngineeringUnit]:
        return await self.get_by_attribute(db, attribute="code", value=code)

    async def get_or_404(self, db: AsyncSession, *, id: int) -> usr_models.EngineeringUnit:
        unit = await self.get(db, id)
        if not unit:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Engineering Unit with ID {id} not found.")
        return unit

    async def get_all(self, db: AsyncSession, *, active_only: bool = False) -> List[usr_models.EngineeringUnit]:
        """유닛 목록을 이름순으로 조회합니다."""
        statement = select(self.model)
        if active_only:
            statement = statement.where(self.model.is_active == True)  # noqa: E712
        statement = statement.order_by(self.model.name, self.model.id)
        result = await db.execute(statement)
        return list(result.scalars().all())

    async def code_exists(self, db: AsyncSession, *, code: str, exclude_id: Optional[int] = None) -> bool:
        statement = select(self.model.id).where(self.model.code == code)
        if exclude_id is not None:
            statement = statement.where(self.model.id != exclude_id)
        result = await db.execute(statement.limit(1))
        return result.first() is not None

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.EngineeringUnitCreate) -> usr_models.EngineeringUnit:
        if await self.code_exists(db, code=obj_in.code):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Engineering Unit with code '{obj_in.code}' already exists."
            )
        return await super().create(db, obj_in=obj_in)

    async def update(
        self, db: AsyncSession, *, db_obj: usr_models.EngineeringUnit, obj_in: usr_schemas.EngineeringUnitUpdate
    ) -> usr_models.EngineeringUnit:
        if obj_in.code is not None and await self.code_exists(db, code=obj_in.code, exclude_id=db_obj.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Engineering Unit with code '{obj_in.code}' already exists."
            )
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def has_dependents(self, db: AsyncSession, *, id: int) -> bool:
        """유닛을 참조하는 측정값 또는 사용자가 있는지 확인합니다."""
        data_point_stmt = select(dpm_models.DataPoint.id).where(dpm_models.DataPoint.unit_id == id).limit(1)
        if (await db.execute(data_point_stmt)).first():
            return True
        user_stmt = select(usr_models.User.id).where(usr_models.User.unit_id == id).limit(1)
        return (await db.execute(user_stmt)).first() is not None

    async def remove(self, db: AsyncSession, *, id: int) -> bool:
        """
        유닛을 삭제합니다.
        측정값이나 사용자가 참조하고 있으면 비활성화(소프트 삭제)만 하고, 없으면 행을 삭제합니다.
        호출자 입장에서는 두 경우 모두 성공(True)입니다.
        """
        unit = await self.get(db, id)
        if not unit:
            return False

        if await self.has_dependents(db, id=id):
            unit.is_active = False
            db.add(unit)
            await db.commit()
            logger.info("Engineering unit %s (%s) deactivated: dependent records exist.", id, unit.code)
        else:
            await db.delete(unit)
            await db.commit()
            logger.info("Engineering unit %s deleted.", id)
        return True

    async def seed_defaults(self, db: AsyncSession) -> int:
        """유닛이 하나도 없을 때 기본 유닛 4개를 생성합니다."""
        existing = await db.execute(select(self.model.id).limit(1))
        if existing.first():
            return 0
        for code, name, description in DEFAULT_UNITS:
            db.add(usr_models.EngineeringUnit(code=code, name=name, description=description))
        await db.commit()
        logger.info("Seeded %d default engineering units.", len(DEFAULT_UNITS))
        return len(DEFAULT_UNITS)


unit = CRUDEngineeringUnit()


# =============================================================================
# 2. usr.users 테이블 CRUD
# =============================================================================
class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        """이메일(로그인 ID)로 사용자를 조회합니다."""
        return await self.get_by_attribute(db, attribute="email", value=email)

    async def _check_unit(self, db: AsyncSession, unit_id: Optional[int]) -> None:
        if unit_id is not None:
            await unit.get_or_404(db, id=unit_id)

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱하고 중복을 검사합니다."""
        if await self.get_by_email(db, email=obj_in.email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
        await self._check_unit(db, obj_in.unit_id)

        hashed_password = get_password_hash(obj_in.password)
        user_data = obj_in.model_dump(exclude={"password"})
        db_user = usr_models.User(**user_data, password_hash=hashed_password)

        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
        return db_user

    async def update(self, db: AsyncSession, *, db_obj: usr_models.User, obj_in: usr_schemas.UserUpdate) -> usr_models.User:
        """
        사용자 정보를 업데이트합니다. 관리자 계정의 역할 변경 및 비활성화를 방지합니다.
        """
        if db_obj.role == usr_models.UserRole.ADMIN:
            if obj_in.role is not None and obj_in.role != usr_models.UserRole.ADMIN:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot change the role of an admin account."
                )
            if obj_in.is_active is False:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot deactivate an admin account."
                )
        if "unit_id" in obj_in.model_fields_set:
            await self._check_unit(db, obj_in.unit_id)

        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def remove(self, db: AsyncSession, *, id: int) -> usr_models.User:
        """
        사용자를 삭제합니다. 사용자가 기록한 측정값도 함께 삭제됩니다.
        관리자 계정은 삭제를 허용하지 않습니다.
        """
        user_to_delete = await self.get(db, id)
        if not user_to_delete:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

        if user_to_delete.role == usr_models.UserRole.ADMIN:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete an admin account directly."
            )

        return await super().delete(db, id=id)

    async def sign_in(
        self, db: AsyncSession, *, email: str, password: str
    ) -> Tuple[usr_models.SignInResult, Optional[usr_models.User]]:
        """
        이메일/비밀번호로 로그인을 시도하고 결과를 SignInResult로 반환합니다.
        비밀번호 오류가 LOCKOUT_MAX_FAILED_ATTEMPTS회 누적되면 LOCKOUT_MINUTES 동안 계정을 잠급니다.
        """
        user = await self.get_by_email(db, email=email)
        if not user:
            return usr_models.SignInResult.INVALID_CREDENTIALS, None

        if not user.is_active:
            return usr_models.SignInResult.NOT_ALLOWED, user

        now = utc_now()
        lockout_end = ensure_utc(user.lockout_end)
        if lockout_end is not None and lockout_end > now:
            return usr_models.SignInResult.LOCKED_OUT, user

        if not verify_password(password, user.password_hash):
            user.access_failed_count += 1
            result = usr_models.SignInResult.INVALID_CREDENTIALS
            if user.access_failed_count >= settings.LOCKOUT_MAX_FAILED_ATTEMPTS:
                user.lockout_end = now + timedelta(minutes=settings.LOCKOUT_MINUTES)
                user.access_failed_count = 0
                result = usr_models.SignInResult.LOCKED_OUT
                logger.warning("User %s locked out until %s.", user.email, user.lockout_end)
            db.add(user)
            await db.commit()
            return result, user

        user.access_failed_count = 0
        user.lockout_end = None
        if user.two_factor_enabled:
            db.add(user)
            await db.commit()
            return usr_models.SignInResult.REQUIRES_TWO_FACTOR, user

        user.last_login_at = now
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return usr_models.SignInResult.SUCCESS, user

    async def ensure_admin(self, db: AsyncSession) -> Optional[usr_models.User]:
        """
        사용자가 한 명도 없으면 기본 관리자 계정을 생성합니다.
        모의 데이터는 이 계정의 소유로 기록됩니다.
        """
        existing = await db.execute(select(self.model.id).limit(1))
        if existing.first():
            return None

        first_unit = (await db.execute(
            select(usr_models.EngineeringUnit).order_by(usr_models.EngineeringUnit.id).limit(1)
        )).scalars().first()

        admin = usr_models.User(
            email=settings.SEED_ADMIN_EMAIL,
            password_hash=get_password_hash(settings.SEED_ADMIN_PASSWORD.get_secret_value()),
            first_name="Admin",
            last_name="User",
            department="Engineering",
            job_title="System Administrator",
            role=usr_models.UserRole.ADMIN,
            unit_id=first_unit.id if first_unit else None,
        )
        db.add(admin)
        await db.commit()
        await db.refresh(admin)
        logger.info("Default admin user created: %s", admin.email)
        return admin


user = CRUDUser()
