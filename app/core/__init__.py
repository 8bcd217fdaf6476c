# app/core/__init__.py

"""
FastAPI 애플리케이션의 핵심 구성 요소 패키지입니다.

- `config.py`: 애플리케이션의 설정 및 환경 변수 관리 (Pydantic Settings).
- `database.py`: 데이터베이스 연결, 세션 관리 (SQLModel 및 AsyncSQLAlchemy).
- `crud_base.py`: 모든 도메인 CRUD 클래스의 공통 부모 클래스.
- `security.py`: 비밀번호 해싱, JWT 발급/검증, 역할 기반 권한 확인.
- `dependencies.py`: FastAPI의 의존성 주입 시스템에서 사용될 공통 의존성 함수들.
- `tasks.py`: ARQ 워커가 실행하는 공통 태스크 (DB 헬스 체크).
"""

__title__ = "DMS Core"
__description__ = "Core components for DMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
