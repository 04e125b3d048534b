import json

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    # Supabase-compatible identity provider
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str
    SUPABASE_SERVICE_ROLE_KEY: str  # server-only, never sent to clients
    SUPABASE_JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    IDENTITY_TIMEOUT_SECONDS: float = 10.0
    ACCESS_TOKEN_COOKIE_MAX_AGE: int = 3600

    BACKEND_URL: str = "http://localhost:8000"

    BACKEND_CORS_ORIGINS: str = '["http://localhost:3000"]'

    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Aula Virtual API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Storage backend: "local" for development, "s3" for any S3-compatible bucket
    STORAGE_BACKEND: str = "local"
    UPLOAD_DIR: str = "./uploads"
    STORAGE_BUCKET: str = "videos"
    S3_ENDPOINT_URL: str = ""  # e.g. https://<project>.supabase.co/storage/v1/s3
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_REGION: str = "us-east-1"

    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "10/minute"

    SIGNED_URL_EXPIRE_SECONDS: int = 7200
    MAX_VIDEO_SIZE_MB: int = 500

    DEFAULT_ENROLLMENT_WEEKS: int = 14
    COMPLETION_THRESHOLD_PERCENT: int = 90
    PROGRESS_SAVE_INTERVAL_SECONDS: int = 5

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins(self) -> list[str]:
        try:
            parsed: list[str] = json.loads(self.BACKEND_CORS_ORIGINS)
            return parsed
        except json.JSONDecodeError:
            return ["http://localhost:3000"]

    @property
    def max_video_size_bytes(self) -> int:
        return self.MAX_VIDEO_SIZE_MB * 1024 * 1024


settings = Settings()
