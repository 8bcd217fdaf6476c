# app/utils/__init__.py

"""
FastAPI 애플리케이션의 'utils' 패키지입니다.

이 패키지는 특정 비즈니스 도메인에 속하지 않는,
프로젝트 전반에서 재사용될 수 있는 범용 유틸리티 함수들을 포함합니다.

주요 서브모듈:
- `dates.py`: UTC 기준 일시 처리 유틸리티 (DB 종류별 timezone 처리 차이 보정).
"""

# flake8: noqa
from . import dates

__title__ = "DMS Application Utilities"
__description__ = "Provides common, reusable utility functions for the application."
__version__ = "0.1.0"
__all__ = ["dates"]
