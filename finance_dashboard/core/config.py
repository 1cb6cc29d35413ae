from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App settings
    PROJECT_NAME: str = "FinanceDashboard"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:5173", "http://localhost:3000"])

    # Storage backend: "dynamo" or "memory"
    STORE_BACKEND: str = Field(default="dynamo")

    # DynamoDB
    DYNAMO_REGION: str = Field(default="eu-west-1")
    DYNAMO_ENDPOINT_URL: Optional[str] = Field(default=None)
    DYNAMO_TRANSACTIONS_TABLE: str = Field(
        default="finance-dashboard-transactions", validation_alias="DYNAMO_TABLE_TRANSACTIONS"
    )
    DYNAMO_CATEGORIES_TABLE: str = Field(
        default="finance-dashboard-categories", validation_alias="DYNAMO_TABLE_CATEGORIES"
    )

    # JWT verification (tokens are issued by the auth service)
    JWT_SECRET_KEY: str = Field(default="change-me-in-production", validation_alias="JWT_SECRET")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Dashboard
    RECENT_TRANSACTIONS_LIMIT: int = 5

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


settings = Settings()
