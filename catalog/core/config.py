from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from typing import List
import os
from pydantic import ConfigDict

# Load environment variables from .env file
load_dotenv()


PRODUCTION_CORS_ORIGINS = [
    "https://ecommerce-app-omega-two-64.vercel.app",
    "https://ecommerce-cart-service-f2a908c60d8a.herokuapp.com",
    "https://34.95.5.30.nip.io",
    "http://34.95.5.30.nip.io",
    "https://ecommerce-product-service-56575270905a.herokuapp.com",
]

DEVELOPMENT_CORS_ORIGINS = [
    "https://ecommerce-app-omega-two-64.vercel.app",
    "https://34.95.5.30.nip.io",
    "http://34.95.5.30.nip.io",
    "http://localhost:3000",
    "http://localhost:8080",
]


class ConfigurationError(Exception):
    """Raised when required settings are missing or invalid."""

    pass


class Settings(BaseSettings):
    # Database settings
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_MIN_CONNECTIONS: int = int(os.getenv("DB_MIN_CONNECTIONS", "5"))
    DB_MAX_CONNECTIONS: int = int(os.getenv("DB_MAX_CONNECTIONS", "20"))
    DB_ECHO: bool = os.getenv("DB_ECHO", "false").lower() == "true"

    # HTTP service
    PORT: int = int(os.getenv("PORT", "3001"))
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", os.getenv("NODE_ENV", "development"))
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    # Import pipeline
    DATA_DIR: str = os.getenv("DATA_DIR", "data/kaggle-datasets")
    CATALOG_SOURCES_PATH: str = os.getenv("CATALOG_SOURCES_PATH", "catalog_sources.yaml")
    EXCHANGE_RATE: float = float(os.getenv("EXCHANGE_RATE", "1.6"))
    TARGET_CURRENCY: str = os.getenv("TARGET_CURRENCY", "DZD")
    PRODUCT_BATCH_SIZE: int = int(os.getenv("PRODUCT_BATCH_SIZE", "100"))

    # Deal generation
    DEAL_BATCH_SIZE: int = int(os.getenv("DEAL_BATCH_SIZE", "50"))
    TARGET_DEALS: int = int(os.getenv("TARGET_DEALS", "150"))

    # Worker
    CELERY_BROKER_URL: str = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    CELERY_RESULT_BACKEND: str = os.getenv(
        "CELERY_RESULT_BACKEND", "redis://localhost:6379/0"
    )

    # Other settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def allowed_origins(self) -> List[str]:
        """CORS allow-list: explicit CORS_ORIGINS wins over environment defaults"""
        if self.CORS_ORIGINS:
            return [
                origin.strip()
                for origin in self.CORS_ORIGINS.split(",")
                if origin.strip()
            ]
        if self.is_production:
            return list(PRODUCTION_CORS_ORIGINS)
        return list(DEVELOPMENT_CORS_ORIGINS)

    @property
    def celery_broker_url(self) -> str:
        """Get Celery broker URL with database 0"""
        url = self.CELERY_BROKER_URL
        # If no database specified, append /0
        if "/" not in url.split("://")[1].split("@")[-1]:
            return f"{url}/0"
        return url

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


def validate_settings(config: "Settings") -> None:
    """
    Validate settings once at startup.

    Raises:
        ConfigurationError: listing every missing or invalid value
    """
    problems = []
    if not config.DATABASE_URL:
        problems.append("DATABASE_URL is required")
    if config.EXCHANGE_RATE <= 0:
        problems.append("EXCHANGE_RATE must be positive")
    for name in ("PRODUCT_BATCH_SIZE", "DEAL_BATCH_SIZE", "TARGET_DEALS"):
        if getattr(config, name) <= 0:
            problems.append(f"{name} must be positive")
    if config.ENVIRONMENT.lower() not in ("development", "production", "test"):
        problems.append(
            f"ENVIRONMENT must be development, production or test (got {config.ENVIRONMENT!r})"
        )
    if problems:
        raise ConfigurationError("; ".join(problems))


settings = Settings()
