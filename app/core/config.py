from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROJECT_NAME = "Shared Memories API"
DEFAULT_API_V1_PREFIX = "/api/v1"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    PROJECT_NAME: str = DEFAULT_PROJECT_NAME
    API_V1_PREFIX: str = DEFAULT_API_V1_PREFIX
    ENV: str = 'development'
    DEBUG: bool = False

    LOG_LEVEL: str = 'INFO'
    CORS_ORIGINS: list[str] = ['*']

    STORE_BACKEND: Literal['sql', 'supabase'] = 'sql'
    DATABASE_URL: str = 'sqlite:///./memories.db'
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_TIMEOUT_SECONDS: Optional[float] = None

    MEMORIES_TABLE: str = 'memories'
    MEMORIES_BUCKET: str = 'memories'
    UPLOAD_PREFIX: str = 'public'
    STORAGE_DIR: str = 'storage'
    STORAGE_MOUNT_PATH: str = '/storage'
    STORAGE_PUBLIC_URL: str = 'http://localhost:8000/storage'

    CAMERA_DEVICE_INDEX: int = 0
    CAMERA_WIDTH: int = 1280
    CAMERA_HEIGHT: int = 720
    CAPTURE_JPEG_QUALITY: int = 80

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, value):  # type: ignore[override]
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return []
            if value == '*':
                return ['*']
            return [item.strip() for item in value.split(',') if item.strip()]
        return value

    @field_validator('CAPTURE_JPEG_QUALITY')
    @classmethod
    def check_jpeg_quality(cls, value: int) -> int:
        if not 1 <= value <= 95:
            raise ValueError('CAPTURE_JPEG_QUALITY must be between 1 and 95')
        return value


settings = Settings()
