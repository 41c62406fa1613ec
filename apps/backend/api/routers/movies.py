"""
Movie endpoints.

Browsing, movie details with reviews, adding movies and duplicate cleanup.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_config, get_db, resolve_page, validate_pagination
from api.exceptions import NotFoundError, ValidationError
from api.schemas.common import StatusResponse
from api.schemas.movie import DedupeResponse, MovieCreate, MovieListResponse
from moviedb.config import Config
from moviedb.database import DatabaseManager
from moviedb.models import MovieData, serialize_document

router = APIRouter()
logger = logging.getLogger("api.movies")


@router.get("", response_model=MovieListResponse)
def list_movies(
    title: Optional[str] = Query(None, description="Phrase to search in titles"),
    genres: Optional[str] = Query(None, description="Filter by genre"),
    rated: Optional[str] = Query(None, description="Filter by rating (G, PG, ...)"),
    year: Optional[int] = Query(None, description="Filter by release year"),
    page: int = Query(0, description="Page number (0 and 1 are the first page)"),
    movies_per_page: Optional[int] = Query(None, alias="moviesPerPage", description="Items per page"),
    db: DatabaseManager = Depends(get_db),
    config: Config = Depends(get_config),
):
    """
    Browse movies with optional filters, best rated first.
    """
    per_page = config.movies_per_page if movies_per_page is None else movies_per_page
    validate_pagination(page, per_page)

    filters = {
        key: value
        for key, value in (("title", title), ("genres", genres), ("rated", rated), ("year", year))
        if value is not None
    }
    movies, total = db.get_movies_paginated(filters=filters, page=resolve_page(page), per_page=per_page)

    return {
        "moviesList": serialize_document(movies),
        "page": page,
        "filters": filters,
        "entries_per_page": per_page,
        "total_results": total,
    }


@router.get("/genres", response_model=List[str])
def list_genres(db: DatabaseManager = Depends(get_db)):
    """Get all distinct genres."""
    return db.get_genres()


@router.get("/rated", response_model=List[str])
def list_rated(db: DatabaseManager = Depends(get_db)):
    """Get all distinct movie ratings."""
    return db.get_rated()


@router.get("/id/{movie_id}")
def get_movie(
    movie_id: str,
    db: DatabaseManager = Depends(get_db),
):
    """
    Get a movie with its reviews, newest review first.
    """
    movie = db.get_movie_with_reviews(movie_id)
    if not movie:
        raise NotFoundError("Movie", movie_id)
    return serialize_document(movie)


@router.post("/addMovie", response_model=StatusResponse)
def add_movie(
    request: MovieCreate,
    db: DatabaseManager = Depends(get_db),
):
    """
    Add a movie to the catalogue.

    Year and runtime are stored as integers, the release date as a
    date, and the IMDb field 'rating,votes,id' as a sub-document.
    """
    try:
        movie = MovieData.from_form(request.model_dump())
    except ValueError as e:
        raise ValidationError(str(e))

    movie_id = db.add_movie(movie.to_document())
    logger.info(f"Movie added: {movie.title} ({movie.year}) id={movie_id}")
    return StatusResponse(id=str(movie_id))


@router.delete("/deleteDups", response_model=DedupeResponse)
def delete_duplicates(db: DatabaseManager = Depends(get_db)):
    """
    Delete duplicate movies.

    Movies sharing a plot, one title and one year are duplicates;
    the oldest document of each group is kept.
    """
    groups = db.get_duplicate_groups()
    if not groups:
        return DedupeResponse(groups=0, deleted=0, success=True, message="No duplicates to delete")

    stats = db.delete_duplicates(groups)
    if not stats.success:
        logger.warning(f"Duplicate cleanup incomplete for: {', '.join(stats.failed_groups)}")
    else:
        logger.info(f"Duplicate cleanup: deleted={stats.deleted} groups={stats.groups}")
    return DedupeResponse(**stats.to_dict())
