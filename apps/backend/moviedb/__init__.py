"""
MovieDB - movie catalogue, reviews and movie request management.

This package provides:
- Configuration loading
- Document store access for movies, reviews and movie requests
- Identity provider (Auth0) management client
- Movie request approval workflow
- Duplicate movie detection
- Admin command-line tools
"""

from .config import Config
from .models import (
    ApprovalStats,
    DedupeStats,
    DuplicateGroup,
    ImdbInfo,
    MovieData,
    MovieRequestData,
    RequestStatus,
    ReviewData,
)
from .database import DatabaseManager
from .identity import IdentityClient, IdentityProviderError
from .approval import ApprovalManager, TransitionResult

__version__ = "1.0.0"
__all__ = [
    "Config",
    "ApprovalStats",
    "DedupeStats",
    "DuplicateGroup",
    "ImdbInfo",
    "MovieData",
    "MovieRequestData",
    "RequestStatus",
    "ReviewData",
    "DatabaseManager",
    "IdentityClient",
    "IdentityProviderError",
    "ApprovalManager",
    "TransitionResult",
]
