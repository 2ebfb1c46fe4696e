from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="docker", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="gst_billing", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    # Infrastructure
    DATABASE_URL: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/gst_billing_db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    DB_ECHO: bool = Field(default=False, validation_alias=AliasChoices("DB_ECHO", "db_echo"))

    # Auth (user JWT)
    USER_JWT_SECRET: str = Field(
        default="change-me-in-production",
        validation_alias=AliasChoices("USER_JWT_SECRET", "user_jwt_secret"),
    )
    JWT_ALGORITHM: str = Field(default="HS256", validation_alias=AliasChoices("JWT_ALGORITHM", "jwt_algorithm"))
    USER_JWT_ACCESS_EXPIRE_MINUTES: int = Field(
        default=60,
        validation_alias=AliasChoices("USER_JWT_ACCESS_EXPIRE_MINUTES", "user_jwt_access_expire_minutes"),
    )

    # Billing
    # Issuer state used when the logged-in user has no company state on file.
    DEFAULT_ISSUER_STATE: str = Field(
        default="",
        validation_alias=AliasChoices("DEFAULT_ISSUER_STATE", "default_issuer_state"),
    )
    INVOICE_NUMBER_PREFIX: str = Field(
        default="INV",
        validation_alias=AliasChoices("INVOICE_NUMBER_PREFIX", "invoice_number_prefix"),
    )


settings = Settings()
