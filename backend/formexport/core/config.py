from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # API
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Form Submission Export"
    VERSION: str = "0.1.0"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            return [i.strip() for i in v.split(",")]
        return v

    # Database
    DATABASE_URL: str = "sqlite:///./form_export.db"

    # Blob storage (local filesystem adapter)
    STORAGE_PATH: str = "./storage"

    # Background export runner: inline or thread
    RUNNER: str = "thread"
    MAX_WORKERS: int = 4

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None  # Rotating file logs are only written when set

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    @field_validator("RUNNER")
    @classmethod
    def validate_runner(cls, v: str) -> str:
        if v not in ("inline", "thread"):
            raise ValueError(f"RUNNER must be 'inline' or 'thread', got '{v}'")
        return v


settings = Settings()
