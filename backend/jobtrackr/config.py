from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/jobtrackr.db"
    secret_key: str = "dev-secret-key-change-in-production"
    log_level: str = "INFO"

    # Frontend origins allowed by CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Job-title referential (ROME export)
    job_titles_path: str = "./data/job-titles.json"
    job_titles_cache_ttl_seconds: int = 3600  # 1 hour

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
