from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Church Members API settings, read from the environment or a .env file.

    DATABASE_URL and SECRET_KEY have no default and must be provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    APP_NAME: str = "Church Members API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Shared with the auth service that issues the member tokens
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"

    # False reserves ADMINGERAL to the system for role changes too,
    # not only for member creation
    ALLOW_ADMINGERAL_PROMOTION: bool = True

    # Comma-separated list, empty disables CORS
    CORS_ORIGINS: str = ""
    CORS_ALLOW_CREDENTIALS: bool = True

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
