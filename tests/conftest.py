# tests/conftest.py

import os
from typing import AsyncGenerator, Callable, Awaitable
from contextlib import asynccontextmanager
from decimal import Decimal

# --- 테스트 환경 변수 설정 ---
# app 모듈이 임포트되기 전에 설정해야 Settings()가 이 값을 사용합니다.
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-dms"
os.environ["ARQ_ENABLED"] = "False"
os.environ["AUTO_CREATE_TABLES"] = "False"
os.environ["SEED_DEFAULT_DATA"] = "False"
os.environ["SEED_MOCK_DATA"] = "False"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

# app.main을 임포트하여 FastAPI 앱 인스턴스에 접근합니다.
from app.main import app as main_app  # noqa: E402
from app.core import dependencies as deps  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.core.database import get_session, create_db_and_tables, engine_options  # noqa: E402
from app.core.security import get_password_hash  # noqa: E402

# --- 모든 모델 임포트 ---
#  SQLModel.metadata.create_all()이 모든 테이블을 인식하려면 모든 모델 클래스가 임포트되어야 합니다.
from app.domains.models import *  # noqa: F401, F403, E402

from app.domains.usr import models as usr_models  # noqa: E402
from app.domains.dpm import models as dpm_models  # noqa: E402
from app.domains.dpm import schemas as dpm_schemas  # noqa: E402
from app.domains.dpm import crud as dpm_crud  # noqa: E402


# --- 데이터베이스 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    테스트 함수마다 임시 SQLite 파일 DB를 만들고 모든 테이블을 생성합니다.
    SQLite에는 스키마가 없으므로 'usr', 'dpm' 스키마는 기본 스키마로 변환됩니다.
    """
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'test_dms.db'}"
    engine = create_async_engine(
        database_url,
        echo=False,
        future=True,
        poolclass=NullPool,     # 각 연결이 독립적으로 사용되고 바로 닫히도록 함
        **engine_options(database_url),
    )
    await create_db_and_tables(bind=engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    각 테스트 함수마다 독립된 DB에 연결된 비동기 세션을 제공합니다.
    API 요청도 이 세션을 사용하도록 의존성이 오버라이드됩니다.
    """
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with TestingSessionLocal() as session:
        yield session


# --- 엔지니어링 유닛 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def test_unit_a(db_session: AsyncSession) -> usr_models.EngineeringUnit:
    """테스트용 공정 유닛(PROC-A)을 데이터베이스에 생성하고 반환합니다."""
    unit = usr_models.EngineeringUnit(code="PROC-A", name="Process Engineering Unit A")
    db_session.add(unit)
    await db_session.commit()
    await db_session.refresh(unit)
    return unit


@pytest_asyncio.fixture(scope="function")
async def test_unit_b(db_session: AsyncSession) -> usr_models.EngineeringUnit:
    """테스트용 품질 유닛(QC-LAB)을 데이터베이스에 생성하고 반환합니다."""
    unit = usr_models.EngineeringUnit(code="QC-LAB", name="Quality Control Lab")
    db_session.add(unit)
    await db_session.commit()
    await db_session.refresh(unit)
    return unit


# --- 역할별 사용자 픽스처 (팩토리 사용) ---
@pytest_asyncio.fixture(scope="function")
def user_factory(db_session: AsyncSession) -> Callable[..., Awaitable[usr_models.User]]:
    """
    역할과 속성을 지정하여 테스트 사용자를 생성하는 팩토리 함수를 반환합니다.
    **kwargs는 User 모델 생성자에 그대로 전달됩니다.
    """
    async def _create_user(
        email: str,
        password: str,
        role: usr_models.UserRole,
        unit_id: int = None,
        is_active: bool = True,
        **kwargs,
    ) -> usr_models.User:
        user_data = {
            "email": email,
            "password_hash": get_password_hash(password),
            "first_name": email.split("@")[0].capitalize(),
            "last_name": "Tester",
            "role": role,
            "unit_id": unit_id,
            "is_active": is_active,
            **kwargs,
        }
        user = usr_models.User(**user_data)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _create_user


@pytest_asyncio.fixture(scope="function")
async def test_admin_user(user_factory: Callable, test_unit_a: usr_models.EngineeringUnit) -> usr_models.User:
    """관리자(ADMIN) 사용자를 생성합니다. 모의 데이터 생성 대상 계정과 같은 이메일을 사용합니다."""
    return await user_factory(
        settings.SEED_ADMIN_EMAIL, "adminpass123",
        role=usr_models.UserRole.ADMIN,
        unit_id=test_unit_a.id,
        first_name="Admin",
        last_name="User",
    )


@pytest_asyncio.fixture(scope="function")
async def test_engineer(user_factory: Callable, test_unit_a: usr_models.EngineeringUnit) -> usr_models.User:
    """엔지니어(ENGINEER) 사용자를 생성합니다."""
    return await user_factory(
        "engineer@example.com", "engineerpass123",
        role=usr_models.UserRole.ENGINEER,
        unit_id=test_unit_a.id,
    )


@pytest_asyncio.fixture(scope="function")
async def test_user(user_factory: Callable, test_unit_a: usr_models.EngineeringUnit) -> usr_models.User:
    """일반 사용자(GENERAL_USER)를 생성합니다."""
    return await user_factory(
        "testuser@example.com", "testpass123",
        role=usr_models.UserRole.GENERAL_USER,
        unit_id=test_unit_a.id,
    )


# --- 측정값 팩토리 ---
@pytest_asyncio.fixture(scope="function")
def data_point_factory(db_session: AsyncSession) -> Callable[..., Awaitable[dpm_models.DataPoint]]:
    """저장소(crud)를 통해 측정값을 생성하는 팩토리 함수를 반환합니다."""
    async def _create_data_point(
        user: usr_models.User,
        unit: usr_models.EngineeringUnit,
        parameter_name: str = "Temperature",
        value="25.5",
        measurement_unit: str = "°C",
        **kwargs,
    ) -> dpm_models.DataPoint:
        obj_in = dpm_schemas.DataPointCreate(
            parameter_name=parameter_name,
            value=Decimal(str(value)),
            unit=measurement_unit,
            unit_id=unit.id,
            **kwargs,
        )
        return await dpm_crud.data_point.create(db_session, obj_in=obj_in, user_id=user.id)
    return _create_data_point


# --- 역할별 인증 클라이언트 픽스처 ---
# 로그인 API(/api/v1/usr/auth/token)를 실제로 호출해 받은 토큰을 Authorization 헤더에 포함시킵니다.
@pytest_asyncio.fixture(scope="function")
def authorized_client_factory(
    db_session: AsyncSession,
) -> Callable[[usr_models.User, str], AsyncGenerator[AsyncClient, None]]:
    """
    특정 사용자로 로그인된 AsyncClient를 생성하는 팩토리 함수를 반환합니다.
    """
    @asynccontextmanager
    async def _create_client_context(user: usr_models.User, password: str) -> AsyncGenerator[AsyncClient, None]:
        def override_get_session():
            yield db_session

        original_overrides = main_app.dependency_overrides.copy()

        try:
            main_app.dependency_overrides.update({
                get_session: override_get_session,
                deps.get_db_session: override_get_session,
            })

            transport = ASGITransport(app=main_app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                login_data = {"username": user.email, "password": password}
                res = await client.post("/api/v1/usr/auth/token", data=login_data)

                if res.status_code != 200:
                    pytest.fail(f"Login failed for {user.email}: {res.text}")

                token = res.json()["access_token"]
                client.headers["Authorization"] = f"Bearer {token}"
                yield client

        finally:
            main_app.dependency_overrides.clear()
            main_app.dependency_overrides.update(original_overrides)

    return _create_client_context


@pytest_asyncio.fixture(scope="function")
async def admin_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_admin_user: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """관리자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_admin_user, "adminpass123") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def engineer_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_engineer: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """엔지니어로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_engineer, "engineerpass123") as client:
        yield client


@pytest_asyncio.fixture(scope="function")
async def authorized_client(
    authorized_client_factory: Callable[..., AsyncGenerator[AsyncClient, None]],
    test_user: usr_models.User,
) -> AsyncGenerator[AsyncClient, None]:
    """일반 사용자로 인증된 클라이언트를 반환합니다."""
    async with authorized_client_factory(test_user, "testpass123") as client:
        yield client


# --- 비동기 테스트 클라이언트 픽스처 ---
@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    인증되지 않은 사용자를 위한 AsyncClient 인스턴스를 생성하고,
    테스트용 비동기 DB 세션을 주입합니다.
    """
    def override_get_session_and_dependency():
        yield db_session

    original_overrides = main_app.dependency_overrides.copy()

    try:
        main_app.dependency_overrides[get_session] = override_get_session_and_dependency
        main_app.dependency_overrides[deps.get_db_session] = override_get_session_and_dependency

        async with AsyncClient(transport=ASGITransport(app=main_app), base_url="http://test") as async_client:
            yield async_client

    finally:
        # 클라이언트 픽스처가 끝나면 오버라이드를 반드시 복원해야 합니다.
        main_app.dependency_overrides.clear()
        main_app.dependency_overrides.update(original_overrides)
