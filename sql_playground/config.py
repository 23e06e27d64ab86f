from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "SQL Playground Gateway"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Primary data warehouse
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "postgres"
    db_user: str = "postgres"
    db_password: str = ""
    db_sslmode: str = "require"
    primary_database_url: Optional[str] = None
    primary_schema: str = "dbo"

    # User / learner tracking store
    supabase_host: str = "localhost"
    supabase_port: int = 5432
    supabase_db: str = "postgres"
    supabase_user: str = "postgres"
    supabase_password: str = ""
    supabase_sslmode: str = "require"
    tracking_database_url: Optional[str] = None
    tracking_schema: str = "sql_playground"

    db_connect_timeout: int = 10
    db_pool_size: int = 5


settings = Settings()
