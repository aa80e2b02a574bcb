from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field("sqlite+aiosqlite:///./student_records.db", alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Cap on attendance records per (student, course, semester)
    max_attendance_per_semester: int = Field(14, alias="MAX_ATTENDANCE_PER_SEMESTER", ge=1)

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    auto_create_tables: bool = Field(False, alias="AUTO_CREATE_TABLES")

    # Password for the seeded admin/secretar/profesor accounts
    default_user_password: Optional[str] = Field(None, alias="DEFAULT_USER_PASSWORD")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
