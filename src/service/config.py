"""
Configuration setup for the accounts service.

This module handles configuration initialization that is not owned by the
session layer:
- CORS settings
- Password hashing cost
"""
import os
import logging
from typing import Tuple

logger = logging.getLogger('accounts.service.config')


def get_cors_config() -> Tuple[list[str], list[str], list[str]]:
    """
    Parse and return CORS configuration from environment variables.

    Returns:
        Tuple containing (origins, methods, headers) lists
    """
    # Parse allowed origins
    cors_allowed_origins = os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
    cors_allowed_origins = [origin.strip() for origin in cors_allowed_origins if origin.strip()]

    # Development fallback
    if not cors_allowed_origins:
        logger.warning("CORS_ALLOWED_ORIGINS not set, using development defaults")
        cors_allowed_origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]

    # Parse allowed methods
    cors_allowed_methods = os.getenv("CORS_ALLOWED_METHODS", "GET,POST,PUT,DELETE,OPTIONS").split(",")
    cors_allowed_methods = [method.strip() for method in cors_allowed_methods if method.strip()]

    # Parse allowed headers
    cors_allowed_headers = os.getenv("CORS_ALLOWED_HEADERS", "Content-Type").split(",")
    cors_allowed_headers = [header.strip() for header in cors_allowed_headers if header.strip()]

    return cors_allowed_origins, cors_allowed_methods, cors_allowed_headers


def get_bcrypt_rounds() -> int:
    """
    Get the bcrypt cost factor from environment variables.

    Returns:
        Number of bcrypt rounds, 12 if BCRYPT_ROUNDS is not set
    """
    return int(os.getenv("BCRYPT_ROUNDS", 12))


__all__ = [
    'get_cors_config',
    'get_bcrypt_rounds',
]
