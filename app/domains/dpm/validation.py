# app/domains/dpm/validation.py

"""
측정값 유효성 검사 모듈입니다.

입력값만으로 결과가 결정되는 순수 함수이며, 저장소(crud)가 생성/수정 시마다 호출합니다.
위반 사항은 누적되어 "; "로 연결된 하나의 메시지가 됩니다.
"""

from decimal import Decimal
from typing import List, NamedTuple, Optional, Union

Number = Union[Decimal, int, float, str]

# 절대영도 (단위별 하한)
ABSOLUTE_ZERO_CELSIUS = Decimal("-273.15")
ABSOLUTE_ZERO_FAHRENHEIT = Decimal("-459.67")


class ValidationResult(NamedTuple):
    is_valid: bool
    message: Optional[str]


def _to_decimal(value: Number) -> Decimal:
    # float은 str을 거쳐 변환해야 -273.16 같은 경계값이 정확히 유지됩니다.
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def validate_measurement(
    parameter_name: str,
    value: Number,
    unit: str,
    min_value: Optional[Number] = None,
    max_value: Optional[Number] = None,
) -> ValidationResult:
    """
    측정값 하나를 검사합니다.

    - min/max가 주어지면 범위를 벗어나는지 확인합니다 (경계값 포함).
    - 파라미터명(대소문자 무시)에 따라 물리적 하한을 확인합니다:
      pressure / flow rate 는 음수 불가, temperature 는 단위 문자열에
      celsius / fahrenheit 가 포함된 경우 절대영도 미만 불가.
    """
    v = _to_decimal(value)
    errors: List[str] = []

    if min_value is not None and v < _to_decimal(min_value):
        errors.append(f"Value {value} is below minimum allowed value {min_value}")

    if max_value is not None and v > _to_decimal(max_value):
        errors.append(f"Value {value} is above maximum allowed value {max_value}")

    name = (parameter_name or "").lower()
    unit_lower = (unit or "").lower()

    if name == "pressure":
        if v < 0:
            errors.append("Pressure cannot be negative")
    elif name == "temperature":
        if "celsius" in unit_lower and v < ABSOLUTE_ZERO_CELSIUS:
            errors.append("Temperature cannot be below absolute zero (-273.15°C)")
        if "fahrenheit" in unit_lower and v < ABSOLUTE_ZERO_FAHRENHEIT:
            errors.append("Temperature cannot be below absolute zero (-459.67°F)")
    elif name == "flow rate":
        if v < 0:
            errors.append("Flow rate cannot be negative")

    if errors:
        return ValidationResult(False, "; ".join(errors))
    return ValidationResult(True, None)
