# tests/__init__.py

"""
FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

테스트 코드는 `pytest` / `pytest-asyncio` 를 기반으로 작성되며,
각 비즈니스 도메인에 따라 하위 디렉토리로 구조화됩니다.

- `domains/`: usr, dpm 도메인의 테스트 모듈.
- `conftest.py`: 임시 SQLite DB, 사용자/유닛 픽스처, 인증 클라이언트 팩토리.
"""

__title__ = "DMS API Tests"
__description__ = "Test suite for DMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
