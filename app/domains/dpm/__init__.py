# app/domains/dpm/__init__.py

"""
FastAPI 애플리케이션의 'dpm' (Data Point Management) 도메인 패키지입니다.

엔지니어링 유닛별 공정 측정값(Data Point)의 기록/조회와 유효성 판정,
대시보드 통계, 차트 데이터, CSV/Excel 내보내기, 모의 데이터 생성을 담당합니다.

주요 서브모듈:
- `models.py`: 'dpm' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 요청/응답 Pydantic 모델.
- `validation.py`: 측정값 범위/물리적 타당성 검사 (순수 함수).
- `crud.py`: 측정값 저장소 (생성 시 검증, 필터 조회, 최근 목록, 파라미터 목록).
- `stats.py`: 대시보드 통계 및 차트 시리즈 집계.
- `export.py`: CSV / Excel 내보내기.
- `tasks.py`: 모의 데이터 생성기 및 ARQ 태스크.
- `routers.py`: API 엔드포인트.
"""

__title__ = "DMS Data Point Domain"
__description__ = "Manages engineering measurements, validation, statistics and exports."
__version__ = "0.1.0"
__all__ = []
