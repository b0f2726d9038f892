from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "viemind-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "VieMind")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/viemind_dev")
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

    # Auth
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_alg: str = "HS256"
    access_ttl_min: int = int(os.getenv("ACCESS_TTL_MIN", "10080"))  # 7d

    # Uploads
    upload_backend: str = os.getenv("UPLOAD_BACKEND", "local")  # local|s3
    upload_dir: str = os.getenv("UPLOAD_DIR", "uploads")
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
    s3_endpoint: str = os.getenv("S3_ENDPOINT", "http://minio:9000")
    s3_access_key: str = os.getenv("S3_ACCESS_KEY", "minioadmin")
    s3_secret_key: str = os.getenv("S3_SECRET_KEY", "minioadmin")
    s3_bucket_uploads: str = os.getenv("S3_BUCKET_UPLOADS", "viemind-uploads-dev")

    # Listings
    featured_limit: int = int(os.getenv("FEATURED_LIMIT", "6"))
    leaderboard_limit: int = int(os.getenv("LEADERBOARD_LIMIT", "20"))
    top_users_limit: int = int(os.getenv("TOP_USERS_LIMIT", "10"))

settings = Settings()

def get_settings() -> Settings:
    return settings
