from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./data/db.sqlite3"
    api_key: str = ""  # empty = no auth check (local dev)
    log_level: str = "INFO"
    project_days: int = 14
    db_max_retries: int = 3
    db_retry_base_delay: float = 1.0  # seconds, doubled on each retry
    share_link_default_hours: int = 24
    timeline_cell_minutes: int = 30
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
