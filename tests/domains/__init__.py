# tests/domains/__init__.py

"""
FastAPI 애플리케이션의 도메인별 테스트 스위트 패키지입니다.

- `test_auth_n.py`: 로그인 결과 판정, 계정 잠금, 토큰 인증.
- `test_usr_n.py`: 엔지니어링 유닛 / 사용자 관리.
- `test_dpm_*_n.py`: 측정값 저장소, 유효성 검사, 통계, 내보내기, 모의 데이터 생성.
"""

__title__ = "DMS Domain Tests"
__description__ = "Categorized tests for each business domain in DMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
