from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    APP_ENV: str = "development"
    PORT: int = 8002

    # ElasticSearch; leave the login empty for an unauthenticated cluster
    ELASTICSEARCH_URL: str = "http://localhost:9200"
    ELASTICSEARCH_LOGIN: str = ""
    ELASTICSEARCH_PASSWORD: str = ""
    ELASTICSEARCH_REQUEST_TIMEOUT: int = 30

    # Bulk loading (23 retries x 30s back-off ≈ 11.5 min worst case)
    BULK_MAX_RETRIES: int = 23
    BULK_BACKOFF_SECONDS: float = 30.0
    BULK_MAX_CONCURRENCY: int = 4
    BULK_CHUNK_SIZE: int = 500

    # Sentry error monitoring, enabled by SENTRY_DSN
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"
    APP_VERSION: str | None = None


settings = Settings()
