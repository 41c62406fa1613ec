"""
Movie-related Pydantic schemas.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class MovieForm(BaseModel):
    """Movie fields as submitted by the add-movie form."""

    title: str = Field(..., min_length=1, description="Movie title")
    year: Union[int, str] = Field(..., description="Release year")
    fullplot: Optional[str] = Field(None, description="Full plot summary")
    genres: List[str] = Field(default_factory=list, description="Genres")
    runtime: Optional[Union[int, str]] = Field(None, description="Runtime in minutes")
    released: str = Field(..., description="Release date (YYYY-MM-DD)")
    rated: Optional[str] = Field(None, description="Rating (G, PG, PG-13, ...)")


class MovieCreate(MovieForm):
    """Request to add a movie to the catalogue."""

    imdb: Optional[Union[str, List[Any]]] = Field(
        None, description="IMDb info as 'rating,votes,id'"
    )
    poster: Optional[str] = Field(None, description="Poster image URL")


class MovieListResponse(BaseModel):
    """A page of movies."""

    moviesList: List[Dict[str, Any]]
    page: int
    filters: Dict[str, Any]
    entries_per_page: int
    total_results: int


class DedupeResponse(BaseModel):
    """Result of duplicate cleanup."""

    groups: int
    deleted: int
    failed_groups: List[str] = []
    success: bool
    message: Optional[str] = None
