"""
Dependency injection for the API.

Provides dependencies for database access, the identity provider
client, the approval workflow and configuration.
"""

from functools import lru_cache

from fastapi import Depends

from api.exceptions import APIError
from moviedb.approval import ApprovalManager
from moviedb.config import Config
from moviedb.database import DatabaseManager
from moviedb.identity import IdentityClient


@lru_cache()
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()


@lru_cache()
def get_db() -> DatabaseManager:
    """Get cached DatabaseManager instance."""
    config = get_config()
    return DatabaseManager(config)


@lru_cache()
def get_identity_client() -> IdentityClient:
    """Get cached IdentityClient instance."""
    config = get_config()
    return IdentityClient(config)


def get_approval_manager(
    db: DatabaseManager = Depends(get_db),
    config: Config = Depends(get_config),
) -> ApprovalManager:
    """Get an ApprovalManager bound to the current database."""
    return ApprovalManager(db, config.log_dir)


def resolve_page(page: int) -> int:
    """Page 0 and page 1 both address the first page."""
    return 1 if page < 1 else page


def validate_pagination(page: int, per_page: int, max_per_page: int = 100) -> None:
    """
    Validate pagination parameters.

    Args:
        page: Page number (0 or greater; 0 means the first page)
        per_page: Items per page (must be >= 1 and <= max_per_page)
        max_per_page: Maximum allowed items per page

    Raises:
        APIError: 400 invalid_pagination if parameters are invalid
    """
    if page < 0:
        raise APIError(400, "invalid_pagination", "Page number must be >= 0")
    if per_page < 1 or per_page > max_per_page:
        raise APIError(400, "invalid_pagination", f"moviesPerPage must be between 1 and {max_per_page}")
