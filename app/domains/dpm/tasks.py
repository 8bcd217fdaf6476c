# app/domains/dpm/tasks.py

"""
모의 측정 데이터 생성 작업입니다.

측정값이 하나도 없을 때만 최근 30일치 데이터를 생성하며,
난수 발생기(random.Random)를 인자로 받아 결과를 재현할 수 있습니다.
"""

import logging
import random
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, NamedTuple, Optional

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.database import get_async_session_context
from app.utils.dates import ensure_utc, utc_now
from app.domains.usr import models as usr_models
from . import models as dpm_models

#  로거 설정
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SEED_DAYS = 30
MIN_READINGS_PER_DAY = 3
MAX_READINGS_PER_DAY = 8
NOTE_PROBABILITY = 0.7
INVALID_PROBABILITY = 0.05
INVALID_MESSAGE = "Value outside normal range"


class ParameterTemplate(NamedTuple):
    name: str
    unit: str
    min_value: Decimal
    max_value: Decimal


def _template(name: str, unit: str, min_value: str, max_value: str) -> ParameterTemplate:
    return ParameterTemplate(name, unit, Decimal(min_value), Decimal(max_value))


# 유닛 코드별 측정 파라미터 (허용 최소/최대값 포함)
UNIT_PARAMETERS: Dict[str, List[ParameterTemplate]] = {
    "PROC-A": [
        _template("Temperature", "°C", "20", "80"),
        _template("Pressure", "bar", "1", "10"),
        _template("Flow Rate", "L/min", "50", "500"),
        _template("pH Level", "pH", "6.5", "8.5"),
        _template("Conductivity", "µS/cm", "100", "1000"),
    ],
    "QC-LAB": [
        _template("Viscosity", "cP", "1", "100"),
        _template("Density", "g/cm³", "0.8", "1.2"),
        _template("Moisture Content", "%", "0", "15"),
        _template("Purity", "%", "95", "99.9"),
        _template("Particle Size", "µm", "10", "500"),
    ],
    "MAINT": [
        _template("Vibration", "mm/s", "0", "10"),
        _template("Motor Current", "A", "5", "50"),
        _template("Bearing Temperature", "°C", "30", "70"),
        _template("Oil Pressure", "bar", "2", "8"),
        _template("Runtime Hours", "hrs", "0", "8760"),
    ],
    "SAFE-ENV": [
        _template("CO2 Level", "ppm", "300", "1000"),
        _template("Noise Level", "dB", "40", "85"),
        _template("Ambient Temperature", "°C", "15", "35"),
        _template("Humidity", "%", "30", "70"),
        _template("Air Quality Index", "AQI", "0", "300"),
    ],
}
GENERIC_PARAMETERS = [_template("Generic Parameter", "units", "0", "100")]

# 파라미터별 생성값 범위 (하한, 상한) - 실제 운전값에 가까운 분포
VALUE_RANGES: Dict[str, tuple] = {
    "Temperature": (35, 55),
    "Pressure": (3.5, 6.5),
    "Flow Rate": (200, 300),
    "pH Level": (6.9, 7.5),
    "Conductivity": (400, 600),
    "Viscosity": (15, 35),
    "Density": (0.95, 1.05),
    "Moisture Content": (3, 7),
    "Purity": (98, 99.5),
    "Particle Size": (50, 150),
    "Vibration": (0.5, 3.5),
    "Motor Current": (20, 30),
    "Bearing Temperature": (45, 55),
    "Oil Pressure": (4, 6),
    "Runtime Hours": (0, 8760),
    "CO2 Level": (300, 500),
    "Noise Level": (60, 70),
    "Ambient Temperature": (19, 25),
    "Humidity": (40, 60),
    "Air Quality Index": (0, 100),
}
DEFAULT_VALUE_RANGE = (0, 100)

NOTE_OPTIONS = [
    "Normal operation",
    "Routine measurement",
    "Calibration check completed",
    "Equipment running smoothly",
    "Within acceptable range",
    "Scheduled maintenance performed",
    "Quality control sample",
    "Baseline measurement",
    "Post-maintenance reading",
    "Shift change reading",
]


def get_parameters_for_unit(unit_code: str) -> List[ParameterTemplate]:
    return UNIT_PARAMETERS.get(unit_code, GENERIC_PARAMETERS)


def generate_value(parameter_name: str, rng: random.Random) -> Decimal:
    """파라미터별 범위 안에서 값을 생성해 소수점 둘째 자리로 반올림합니다."""
    low, high = VALUE_RANGES.get(parameter_name, DEFAULT_VALUE_RANGE)
    raw = low + rng.random() * (high - low)
    return Decimal(str(round(raw, 2)))


def generate_notes(rng: random.Random) -> Optional[str]:
    if rng.random() < NOTE_PROBABILITY:
        return rng.choice(NOTE_OPTIONS)
    return None


async def seed_mock_data(
    db: AsyncSession, *, rng: Optional[random.Random] = None, now: Optional[datetime] = None
) -> int:
    """
    모의 측정 데이터를 생성하고, 생성된 행 수를 반환합니다.
    측정값이 이미 있으면 아무것도 하지 않고 0을 반환합니다.
    """
    rng = rng or random.Random()
    now = ensure_utc(now) if now else utc_now()

    existing_count = (await db.execute(select(func.count(dpm_models.DataPoint.id)))).scalar_one()
    if existing_count > 0:
        logger.info("Mock data already exists. Found %d data points.", existing_count)
        return 0

    logger.info("Starting to seed mock data...")

    admin = (await db.execute(
        select(usr_models.User).where(usr_models.User.email == settings.SEED_ADMIN_EMAIL)
    )).scalars().first()
    if admin is None:
        logger.error("Admin user '%s' not found. Cannot seed data.", settings.SEED_ADMIN_EMAIL)
        return 0

    units = list((await db.execute(
        select(usr_models.EngineeringUnit).order_by(usr_models.EngineeringUnit.id)
    )).scalars().all())
    if not units:
        logger.error("No engineering units found. Cannot seed data.")
        return 0

    first_day = (now - timedelta(days=SEED_DAYS)).replace(hour=0, minute=0, second=0, microsecond=0)
    data_points: List[dpm_models.DataPoint] = []

    for day in range(SEED_DAYS):
        current_date = first_day + timedelta(days=day)
        for unit in units:
            readings_per_day = rng.randint(MIN_READINGS_PER_DAY, MAX_READINGS_PER_DAY)
            for _ in range(readings_per_day):
                timestamp = current_date + timedelta(hours=rng.randint(0, 23), minutes=rng.randint(0, 59))
                for template in get_parameters_for_unit(unit.code):
                    is_valid = rng.random() >= INVALID_PROBABILITY
                    data_points.append(dpm_models.DataPoint(
                        parameter_name=template.name,
                        value=generate_value(template.name, rng),
                        unit=template.unit,
                        min_value=template.min_value,
                        max_value=template.max_value,
                        notes=generate_notes(rng),
                        timestamp=timestamp,
                        user_id=admin.id,
                        unit_id=unit.id,
                        is_valid=is_valid,
                        validation_message=None if is_valid else INVALID_MESSAGE,
                    ))

    db.add_all(data_points)
    await db.commit()
    logger.info("Successfully seeded %d mock data points!", len(data_points))
    return len(data_points)


async def seed_mock_data_task(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """ARQ 워커에서 실행되는 모의 데이터 생성 작업 (POST /dpm/seed 가 예약)"""
    logger.info("백그라운드 작업 시작: 모의 측정 데이터 생성")
    async with get_async_session_context() as db:
        created = await seed_mock_data(db)
    logger.info("작업 완료! 총 %d개의 측정값이 생성됨.", created)
    return {"status": "success", "created": created}
