# app/core/config.py

from typing import Any
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),  # 프로젝트 루트의 .env 파일을 명시적으로 지정
        env_file_encoding='utf-8',
        extra='ignore',                      # .env 파일에 정의되었지만 모델에 없는 변수는 무시
        case_sensitive=True                  # 환경 변수 이름 대소문자 구분
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "DMS FastAPI API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Engineering Data Monitoring System (DMS) API"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable debug mode for detailed logging and error messages")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="Async SQLAlchemy database URL (postgresql+asyncpg://...)")
    AUTO_CREATE_TABLES: bool = Field(True, description="Create missing tables on startup")

    # --- JWT (JSON Web Token) 설정 ---
    SECRET_KEY: SecretStr = Field(..., description="Secret key for JWT token signing. Keep this highly secure!")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., HS256)")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token expiration time in minutes")

    # --- 로그인 잠금(lockout) 정책 ---
    LOCKOUT_MAX_FAILED_ATTEMPTS: int = Field(5, description="Failed sign-ins before the account is locked")
    LOCKOUT_MINUTES: int = Field(5, description="Lockout duration in minutes")

    # --- ARQ (Redis 작업 큐) 설정 ---
    ARQ_ENABLED: bool = Field(True, description="Create the ARQ redis pool on startup")
    REDIS_HOST: str = Field("localhost", description="Redis host for ARQ")
    REDIS_PORT: int = Field(6379, description="Redis port for ARQ")

    # --- 초기 데이터 설정 ---
    SEED_DEFAULT_DATA: bool = Field(True, description="Insert default engineering units and admin user on startup")
    SEED_MOCK_DATA: bool = Field(False, description="Generate 30 days of mock data points on startup")
    SEED_ADMIN_EMAIL: str = Field("admin@engineering.com", description="Default admin account (owner of mock data)")
    SEED_ADMIN_PASSWORD: SecretStr = Field(SecretStr("Admin123!"), description="Default admin password")

    # Post-initialization validation (Pydantic v2 BaseSettings)
    def model_post_init(self, __context: Any) -> None:  # noqa: ANN001
        # 운영 환경에서는 모의 데이터를 생성하지 않습니다.
        if self.APP_ENV == "production":
            self.SEED_MOCK_DATA = False


settings = Settings()
