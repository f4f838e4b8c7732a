from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "tailorshop"
    POSTGRES_USER: str = "tailorshop"
    POSTGRES_PASSWORD: str = "tailorshop"
    # Full SQLAlchemy URL; takes precedence over the POSTGRES_* parts (e.g. sqlite for local runs)
    DATABASE_URL: Optional[str] = None

    SERVICE_NAME: str = "tailorshop-backoffice"
    SERVICE_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    RUN_MIGRATIONS: bool = True
    CORS_ORIGINS: list[str] = ["*"]

    ORDER_NUMBER_PREFIX: str = "AR-"
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

@lru_cache
def get_settings() -> Settings:
    return Settings()
