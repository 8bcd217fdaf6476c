# app/utils/dates.py

from datetime import datetime, UTC
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    일시 값을 timezone-aware UTC로 변환합니다.
    SQLite는 timezone 정보를 저장하지 않으므로 naive 값은 UTC로 간주합니다.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
