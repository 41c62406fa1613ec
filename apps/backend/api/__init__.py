"""
MovieDB REST API.

This module provides a FastAPI-based REST API for the movie review
frontend: movie browsing, reviews, movie requests and user profile
management.
"""

from api.main import app

__all__ = ["app"]
