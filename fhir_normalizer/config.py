import logging

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration with environment variable support"""

    # Logging
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(levelname)s - %(message)s"

    # Conversion
    default_fhir_version: str = "4.0.1"  # used when converter_for() gets no version
    missing_capability_url_base: str = "http://example.org/missing/url"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()


def configure_logging() -> None:
    """Install a root handler from settings. Call once from the application entry point."""
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=settings.log_format)
