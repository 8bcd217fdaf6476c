# tests/domains/test_dpm_n.py

"""
'dpm' 도메인 (측정값 관리)의 저장소(crud)와 API 엔드포인트 통합 테스트 모듈입니다.
"""

from datetime import datetime, timedelta, UTC
from decimal import Decimal
from typing import Callable

import pytest
from fastapi import HTTPException
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from app.domains.usr import models as usr_models
from app.domains.dpm import crud as dpm_crud
from app.domains.dpm import schemas as dpm_schemas

BASE_TIME = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


# =============================================================================
# 1. 저장소 (crud)
# =============================================================================
@pytest.mark.asyncio
async def test_create_fills_validation_and_details(
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    data_point = await data_point_factory(
        test_engineer, test_unit_a,
        parameter_name="Pressure", value="-2", measurement_unit="bar",
        min_value=Decimal("1"), max_value=Decimal("10"),
    )

    assert data_point.id is not None
    assert data_point.is_valid is False
    assert data_point.validation_message == "Value -2 is below minimum allowed value 1; Pressure cannot be negative"
    assert data_point.user.email == test_engineer.email
    assert data_point.engineering_unit.code == "PROC-A"
    assert data_point.timestamp is not None


@pytest.mark.asyncio
async def test_create_valid_data_point(
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    data_point = await data_point_factory(test_engineer, test_unit_a, timestamp=BASE_TIME)

    assert data_point.is_valid is True
    assert data_point.validation_message is None
    assert data_point.value == Decimal("25.5")


@pytest.mark.asyncio
async def test_create_unknown_unit_or_user(db_session: AsyncSession, test_engineer: usr_models.User):
    obj_in = dpm_schemas.DataPointCreate(parameter_name="Temperature", value=Decimal("1"), unit="°C", unit_id=9999)
    with pytest.raises(HTTPException) as exc_info:
        await dpm_crud.data_point.create(db_session, obj_in=obj_in, user_id=test_engineer.id)
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Engineering Unit with ID 9999 not found."

    with pytest.raises(HTTPException) as exc_info:
        await dpm_crud.data_point.create(db_session, obj_in=obj_in, user_id=9999)
    assert exc_info.value.detail == "User not found"


@pytest.mark.asyncio
async def test_update_recomputes_validation(
    db_session: AsyncSession,
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    data_point = await data_point_factory(test_engineer, test_unit_a, parameter_name="Pressure", value="5", measurement_unit="bar")
    assert data_point.is_valid is True

    updated = await dpm_crud.data_point.update(
        db_session,
        db_obj=data_point,
        obj_in=dpm_schemas.DataPointUpdate(parameter_name="Pressure", value=Decimal("-1"), unit="bar", notes="Sensor drift"),
    )
    assert updated.is_valid is False
    assert updated.validation_message == "Pressure cannot be negative"
    assert updated.notes == "Sensor drift"

    updated = await dpm_crud.data_point.update(
        db_session,
        db_obj=updated,
        obj_in=dpm_schemas.DataPointUpdate(parameter_name="Pressure", value=Decimal("2"), unit="bar"),
    )
    assert updated.is_valid is True
    assert updated.validation_message is None
    assert updated.notes is None


@pytest.mark.asyncio
async def test_get_or_404_and_remove(
    db_session: AsyncSession,
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    data_point = await data_point_factory(test_engineer, test_unit_a)

    assert await dpm_crud.data_point.remove(db_session, id=data_point.id) is True
    assert await dpm_crud.data_point.remove(db_session, id=data_point.id) is False

    with pytest.raises(HTTPException) as exc_info:
        await dpm_crud.data_point.get_or_404(db_session, id=data_point.id)
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == f"DataPoint with ID {data_point.id} not found."


@pytest.mark.asyncio
async def test_get_filtered_ordering_and_filters(
    db_session: AsyncSession,
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    test_unit_b: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    oldest = await data_point_factory(test_engineer, test_unit_a, parameter_name="Temperature", timestamp=BASE_TIME - timedelta(days=2))
    middle = await data_point_factory(test_engineer, test_unit_a, parameter_name="Bearing Temperature", timestamp=BASE_TIME - timedelta(days=1))
    newest = await data_point_factory(test_engineer, test_unit_b, parameter_name="Viscosity", value="20", measurement_unit="cP", timestamp=BASE_TIME)

    all_points = await dpm_crud.data_point.get_filtered(db_session)
    assert [dp.id for dp in all_points] == [newest.id, middle.id, oldest.id]

    unit_a_points = await dpm_crud.data_point.get_filtered(db_session, unit_id=test_unit_a.id)
    assert [dp.id for dp in unit_a_points] == [middle.id, oldest.id]

    # 기간 필터는 양 끝을 포함합니다.
    ranged = await dpm_crud.data_point.get_filtered(
        db_session, start=BASE_TIME - timedelta(days=2), end=BASE_TIME - timedelta(days=1)
    )
    assert [dp.id for dp in ranged] == [middle.id, oldest.id]

    searched = await dpm_crud.data_point.get_filtered(db_session, parameter_name="Temperature")
    assert {dp.id for dp in searched} == {oldest.id, middle.id}

    limited = await dpm_crud.data_point.get_filtered(db_session, skip=1, limit=1)
    assert [dp.id for dp in limited] == [middle.id]


@pytest.mark.asyncio
async def test_get_recent_and_parameter_names(
    db_session: AsyncSession,
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    test_unit_b: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    for hours in range(5):
        await data_point_factory(test_engineer, test_unit_a, parameter_name="Pressure", value="3", measurement_unit="bar",
                                 timestamp=BASE_TIME + timedelta(hours=hours))
    await data_point_factory(test_engineer, test_unit_a, parameter_name="Temperature", timestamp=BASE_TIME)
    await data_point_factory(test_engineer, test_unit_b, parameter_name="Density", value="1", measurement_unit="g/cm³",
                             timestamp=BASE_TIME)

    recent = await dpm_crud.data_point.get_recent(db_session, count=3)
    assert len(recent) == 3
    assert [dp.timestamp.hour for dp in recent] == [16, 15, 14]

    assert await dpm_crud.data_point.get_parameter_names(db_session) == ["Density", "Pressure", "Temperature"]
    assert await dpm_crud.data_point.get_parameter_names(db_session, unit_id=test_unit_b.id) == ["Density"]


# =============================================================================
# 2. API 엔드포인트
# =============================================================================
@pytest.mark.asyncio
async def test_create_data_point_api(engineer_client: AsyncClient, test_engineer: usr_models.User, test_unit_a: usr_models.EngineeringUnit):
    payload = {
        "parameter_name": "Temperature",
        "value": "-300",
        "unit": "degrees celsius",
        "notes": "Sensor check",
        "unit_id": test_unit_a.id,
        "timestamp": BASE_TIME.isoformat(),
    }
    response = await engineer_client.post("/api/v1/dpm/data_points", json=payload)

    assert response.status_code == 201
    created = response.json()
    assert created["value"] == -300.0
    assert created["is_valid"] is False
    assert created["validation_message"] == "Temperature cannot be below absolute zero (-273.15°C)"
    assert created["user_id"] == test_engineer.id
    assert created["user"]["email"] == test_engineer.email
    assert created["engineering_unit"]["code"] == "PROC-A"


def test_values_rounded_to_four_decimal_places():
    obj_in = dpm_schemas.DataPointCreate(
        parameter_name="Density", value=Decimal("1.00005"), unit="g/cm³", unit_id=1,
        min_value=Decimal("0.8"), max_value=Decimal("1.23456"),
    )

    assert obj_in.value == Decimal("1.0001")
    assert str(obj_in.min_value) == "0.8"
    assert obj_in.max_value == Decimal("1.2346")


@pytest.mark.asyncio
async def test_create_data_point_rounds_extra_decimals(engineer_client: AsyncClient, test_unit_a: usr_models.EngineeringUnit):
    payload = {"parameter_name": "Temperature", "value": "25.12345", "unit": "°C", "unit_id": test_unit_a.id}
    response = await engineer_client.post("/api/v1/dpm/data_points", json=payload)

    assert response.status_code == 201
    assert response.json()["value"] == 25.1235


@pytest.mark.asyncio
async def test_create_data_point_value_too_large(engineer_client: AsyncClient, test_unit_a: usr_models.EngineeringUnit):
    payload = {"parameter_name": "Temperature", "value": "123456789012345", "unit": "°C", "unit_id": test_unit_a.id}
    response = await engineer_client.post("/api/v1/dpm/data_points", json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_data_point_requires_auth(client: AsyncClient, test_unit_a: usr_models.EngineeringUnit):
    payload = {"parameter_name": "Temperature", "value": "25", "unit": "°C", "unit_id": test_unit_a.id}
    response = await client.post("/api/v1/dpm/data_points", json=payload)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_read_data_points_api(
    authorized_client: AsyncClient,
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    test_unit_b: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    first = await data_point_factory(test_engineer, test_unit_a, timestamp=BASE_TIME)
    second = await data_point_factory(test_engineer, test_unit_b, parameter_name="Purity", value="99", measurement_unit="%",
                                      timestamp=BASE_TIME + timedelta(hours=1))

    response = await authorized_client.get("/api/v1/dpm/data_points")
    assert response.status_code == 200
    assert [dp["id"] for dp in response.json()] == [second.id, first.id]

    response = await authorized_client.get("/api/v1/dpm/data_points", params={"unit_id": test_unit_a.id})
    assert [dp["id"] for dp in response.json()] == [first.id]

    response = await authorized_client.get("/api/v1/dpm/data_points", params={"parameter_name": "Pur"})
    assert [dp["id"] for dp in response.json()] == [second.id]

    response = await authorized_client.get(f"/api/v1/dpm/data_points/{first.id}")
    assert response.status_code == 200
    assert response.json()["value"] == 25.5

    response = await authorized_client.get("/api/v1/dpm/data_points/9999")
    assert response.status_code == 404
    assert response.json()["detail"] == "DataPoint with ID 9999 not found."


@pytest.mark.asyncio
async def test_recent_and_parameters_api(
    authorized_client: AsyncClient,
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    await data_point_factory(test_engineer, test_unit_a, parameter_name="Pressure", value="3", measurement_unit="bar")
    await data_point_factory(test_engineer, test_unit_a, parameter_name="Temperature")

    response = await authorized_client.get("/api/v1/dpm/data_points/recent", params={"count": 1})
    assert response.status_code == 200
    assert len(response.json()) == 1

    response = await authorized_client.get("/api/v1/dpm/data_points/parameters")
    assert response.json() == ["Pressure", "Temperature"]


@pytest.mark.asyncio
async def test_update_data_point_owner(
    engineer_client: AsyncClient,
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    data_point = await data_point_factory(test_engineer, test_unit_a, parameter_name="Flow Rate", value="250", measurement_unit="L/min")
    payload = {"parameter_name": "Flow Rate", "value": "-5", "unit": "L/min", "notes": "Reverse flow"}

    response = await engineer_client.put(f"/api/v1/dpm/data_points/{data_point.id}", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["value"] == -5.0
    assert body["is_valid"] is False
    assert body["validation_message"] == "Flow rate cannot be negative"


@pytest.mark.asyncio
async def test_modify_other_users_data_point_forbidden(
    authorized_client: AsyncClient,
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    data_point = await data_point_factory(test_engineer, test_unit_a)
    payload = {"parameter_name": "Temperature", "value": "30", "unit": "°C"}

    response = await authorized_client.put(f"/api/v1/dpm/data_points/{data_point.id}", json=payload)
    assert response.status_code == 403
    assert response.json()["detail"] == "Not enough permissions to modify other user's data point."

    response = await authorized_client.delete(f"/api/v1/dpm/data_points/{data_point.id}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_can_delete_any_data_point(
    admin_client: AsyncClient,
    test_engineer: usr_models.User,
    test_unit_a: usr_models.EngineeringUnit,
    data_point_factory: Callable,
):
    data_point = await data_point_factory(test_engineer, test_unit_a)

    response = await admin_client.delete(f"/api/v1/dpm/data_points/{data_point.id}")
    assert response.status_code == 204

    response = await admin_client.get(f"/api/v1/dpm/data_points/{data_point.id}")
    assert response.status_code == 404
