"""
Configuration settings for the application.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Document store settings
    MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "catalog")
    PRODUCTS_COLLECTION: str = os.getenv("PRODUCTS_COLLECTION", "products")

    # Media storage settings
    MEDIA_BASE_URL: str = os.getenv("MEDIA_BASE_URL", "")
    AWS_BUCKET_NAME: str = os.getenv("AWS_BUCKET_NAME", "")
    AWS_REGION: str = os.getenv("AWS_REGION", "")

    # Moderation
    PRIVILEGED_ROLES: str = os.getenv("PRIVILEGED_ROLES", "admin")

    # Search settings
    SEARCH_DEFAULT_LIMIT: int = int(os.getenv("SEARCH_DEFAULT_LIMIT", "20"))
    SEARCH_MAX_LIMIT: int = int(os.getenv("SEARCH_MAX_LIMIT", "100"))
    QUICK_SEARCH_DEFAULT_LIMIT: int = int(os.getenv("QUICK_SEARCH_DEFAULT_LIMIT", "10"))
    FACET_TOP_N: int = int(os.getenv("FACET_TOP_N", "10"))
    VARIANT_FACET_TOP_N: int = int(os.getenv("VARIANT_FACET_TOP_N", "15"))

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    @property
    def privileged_roles(self) -> frozenset[str]:
        """Roles allowed to auto-approve their own products and moderate others."""
        return frozenset(
            role.strip().lower()
            for role in self.PRIVILEGED_ROLES.split(",")
            if role.strip()
        )

    @property
    def media_base_url(self) -> str:
        """Base URL prepended to storage keys when building preview links."""
        if self.MEDIA_BASE_URL:
            return self.MEDIA_BASE_URL.rstrip("/")
        if self.AWS_BUCKET_NAME and self.AWS_REGION:
            return f"https://{self.AWS_BUCKET_NAME}.s3.{self.AWS_REGION}.amazonaws.com"
        return ""

    def __init__(self):
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with environment={self.ENVIRONMENT}, "
            f"debug={self.debug}, log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
