# app/domains/usr/__init__.py

"""
FastAPI 애플리케이션의 'usr' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'usr' 스키마에 해당하는 데이터 모델과
관련된 비즈니스 로직 및 API 엔드포인트를 포함합니다.

'usr' 도메인은 엔지니어링 유닛, 시스템 사용자, 그리고 로그인/권한 부여와 관련된
핵심 데이터를 관리하는 역할을 합니다.

주요 서브모듈:
- `models.py`: 'usr' 스키마의 테이블에 매핑되는 SQLModel 정의와 역할/로그인 결과 Enum.
- `schemas.py`: 요청 및 응답 유효성 검사용 Pydantic 모델 (인증 토큰 스키마 포함).
- `crud.py`: 유닛/사용자 비동기 CRUD 로직, 로그인 판정 및 계정 잠금 처리.
- `routers.py`: 로그인, 유닛 관리, 사용자 관리 API 엔드포인트.
"""

__title__ = "DMS User Domain"
__description__ = "Manages engineering units and users, and handles sign-in."
__version__ = "0.1.0"
__all__ = []
