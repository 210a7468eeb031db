"""
Configuration Management for Alitheia Remote Logger
===================================================

This module handles:
- Loading environment variables from .env file
- Validating remote endpoint, retry and delivery settings
- Providing centralized configuration access
- Optional local logging setup for applications that want it

Loading the configuration has no side effects on the host process: the root
logger and the filesystem are only touched when an application calls
config.setup_logging() itself.

Usage:
    from alitheia_logger.config import config
    naming_url = config.NAMING_SERVICE_URL
    policy = config.DELIVERY_POLICY

    config.setup_logging()  # optional, for standalone tools
"""

import os
import logging
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from pydantic import validator


logger = logging.getLogger(__name__)

DELIVERY_POLICIES = ("raise", "drop", "local", "buffer")


class Config(BaseSettings):
    """
    Centralized configuration class using Pydantic for validation
    Loads settings from environment variables with type checking
    """

    # =============================================================================
    # APPLICATION SETTINGS
    # =============================================================================

    APP_NAME: str = "Alitheia Remote Logger"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    @validator('LOG_LEVEL')
    def validate_log_level(cls, v):
        """Ensure log level is one the logging module knows"""
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()

    # =============================================================================
    # REMOTE OBJECT LOOKUP
    # =============================================================================

    NAMING_SERVICE_URL: str = "http://localhost:2809"
    LOGGER_OBJECT_NAME: str = "Logger"
    LOGGER_ENDPOINT_URL: Optional[str] = None
    DEFAULT_CHANNEL: str = "sqooss"
    RESOLVER_CACHE_TTL: int = 300  # Seconds a resolved reference stays valid
    CACHE_MAX_SIZE: int = 100

    @validator('NAMING_SERVICE_URL', 'LOGGER_ENDPOINT_URL')
    def validate_url(cls, v):
        """Ensure service URLs are plain HTTP(S) URLs"""
        if v is None:
            return v
        if not v.startswith(('http://', 'https://')):
            raise ValueError(f"URL must start with http:// or https://, got {v}")
        return v.rstrip('/')

    # =============================================================================
    # TRANSPORT, RETRY AND DELIVERY
    # =============================================================================

    REMOTE_TIMEOUT: float = 5.0
    RETRY_COUNT: int = 3
    RETRY_BASE_DELAY: float = 0.5
    RETRY_MAX_DELAY: float = 10.0
    DELIVERY_POLICY: str = "local"
    BUFFER_MAX_SIZE: int = 1000
    MAX_MESSAGE_LENGTH: int = 8192
    SLOW_CALL_THRESHOLD: float = 1.0

    @validator('DELIVERY_POLICY')
    def validate_delivery_policy(cls, v):
        """Ensure the delivery policy is a known one"""
        v = v.lower()
        if v not in DELIVERY_POLICIES:
            raise ValueError(f"Delivery policy must be one of {DELIVERY_POLICIES}, got {v}")
        return v

    @validator('REMOTE_TIMEOUT', 'RETRY_COUNT', 'BUFFER_MAX_SIZE',
              'MAX_MESSAGE_LENGTH', 'RESOLVER_CACHE_TTL', 'CACHE_MAX_SIZE', always=True)
    def validate_positive(cls, v):
        """Ensure sizes, counts and timeouts are positive"""
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}")
        return v

    @validator('RETRY_BASE_DELAY', 'RETRY_MAX_DELAY', 'SLOW_CALL_THRESHOLD', always=True)
    def validate_non_negative(cls, v):
        """Delays may be zero but never negative"""
        if v < 0:
            raise ValueError(f"Value must not be negative, got {v}")
        return v

    # =============================================================================
    # FILE PATHS
    # =============================================================================

    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "./logs/app.log"
    ERROR_LOG_PATH: str = "./logs/errors.log"

    # =============================================================================
    # CONFIGURATION SETUP
    # =============================================================================

    class Config:
        """Pydantic configuration"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    def create_directories(self) -> None:
        """Create necessary directories if they don't exist"""
        if not self.ENABLE_FILE_LOGGING:
            return

        directories = [
            os.path.dirname(self.LOG_FILE_PATH),
            os.path.dirname(self.ERROR_LOG_PATH)
        ]

        for directory in directories:
            if directory:
                Path(directory).mkdir(parents=True, exist_ok=True)

    def setup_logging(self) -> None:
        """
        Configure root logging for an application using this library
        Never called by the library itself
        """
        self.create_directories()

        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

        handlers = [logging.StreamHandler()]  # Console output
        if self.ENABLE_FILE_LOGGING:
            handlers.append(logging.FileHandler(self.LOG_FILE_PATH))

        logging.basicConfig(
            level=getattr(logging, self.LOG_LEVEL.upper()),
            format=log_format,
            handlers=handlers
        )

        if not self.ENABLE_FILE_LOGGING:
            return

        # Create error-specific logger
        error_handler = logging.FileHandler(self.ERROR_LOG_PATH)
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(logging.Formatter(log_format))

        logging.getLogger().addHandler(error_handler)

    def validate_configuration(self) -> bool:
        """
        Validate that all critical configuration is properly set
        Returns True if configuration is valid, raises exception otherwise
        """
        try:
            if self.RETRY_BASE_DELAY > self.RETRY_MAX_DELAY:
                raise ValueError(
                    f"RETRY_BASE_DELAY ({self.RETRY_BASE_DELAY}) must not exceed "
                    f"RETRY_MAX_DELAY ({self.RETRY_MAX_DELAY})"
                )

            if not self.LOGGER_OBJECT_NAME.strip():
                raise ValueError("LOGGER_OBJECT_NAME must not be empty")

            return True

        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise


def load_configuration() -> Config:
    """
    Load and validate configuration from environment
    Leaves root logging and the filesystem untouched
    """
    try:
        # Load environment variables from .env file
        load_dotenv()

        # Create and validate configuration
        config = Config()
        config.validate_configuration()

        logger.debug(f"Configuration loaded for {config.APP_NAME} v{config.APP_VERSION}")
        return config

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise


# =============================================================================
# GLOBAL CONFIGURATION INSTANCE
# =============================================================================

# Create global configuration instance
config = load_configuration()

# Export commonly used settings for easy access
NAMING_SERVICE_URL = config.NAMING_SERVICE_URL
DELIVERY_POLICY = config.DELIVERY_POLICY
