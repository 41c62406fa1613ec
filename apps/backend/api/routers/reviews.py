"""
Review endpoints.

Posting, editing and deleting reviews, and per-user review lookups.
Edits and deletes only apply to the requester's own reviews.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Body, Depends, Query

from api.dependencies import get_db
from api.exceptions import ForbiddenError, NotFoundError
from api.schemas.common import StatusResponse
from api.schemas.review import ReviewCreate, ReviewOwner, ReviewUpdate, ReviewUserNameUpdate
from moviedb.database import DatabaseManager, to_object_id
from moviedb.models import ReviewData, serialize_document

router = APIRouter()
logger = logging.getLogger("api.reviews")


def _raise_review_miss(db: DatabaseManager, review_id: str) -> None:
    """A guarded write matched nothing: either no such review or not the owner."""
    if db.get_review(review_id) is None:
        raise NotFoundError("Review", review_id)
    raise ForbiddenError("Review", review_id)


@router.post("/reviews", response_model=StatusResponse)
def add_review(
    request: ReviewCreate,
    db: DatabaseManager = Depends(get_db),
):
    """Post a review for a movie."""
    review = ReviewData(
        movie_id=to_object_id(request.movie_id),
        user_id=request.user_id,
        name=request.name,
        text=request.text,
        num_stars=request.stars,
        date=datetime.now(),
    )
    review_id = db.add_review(review.to_document())

    logger.info(f"Review added: movie_id={request.movie_id} user={request.user_id} stars={request.stars}")
    return StatusResponse(id=str(review_id))


@router.put("/reviews", response_model=StatusResponse)
def edit_review(
    request: ReviewUpdate,
    db: DatabaseManager = Depends(get_db),
):
    """Edit the text and stars of one of the requester's reviews."""
    matched = db.edit_review(
        request.review_id,
        request.user_id,
        request.text,
        request.stars,
        datetime.now(),
    )
    if not matched:
        logger.warning(f"Review edit refused: review_id={request.review_id} user={request.user_id}")
        _raise_review_miss(db, request.review_id)

    logger.info(f"Review edited: review_id={request.review_id}")
    return StatusResponse(id=request.review_id)


@router.delete("/reviews", response_model=StatusResponse)
def delete_review(
    review_id: str = Query(..., alias="id", description="Review ID"),
    owner: ReviewOwner = Body(...),
    db: DatabaseManager = Depends(get_db),
):
    """Delete one of the requester's reviews."""
    deleted = db.delete_review(review_id, owner.user_id)
    if not deleted:
        logger.warning(f"Review delete refused: review_id={review_id} user={owner.user_id}")
        _raise_review_miss(db, review_id)

    logger.info(f"Review deleted: review_id={review_id}")
    return StatusResponse(id=review_id)


@router.get("/userReviews")
def get_user_reviews(
    user_id: str = Query(..., description="User email"),
    db: DatabaseManager = Depends(get_db),
):
    """Get a user's reviews, highest rated first."""
    return serialize_document(db.get_reviews_by_user(user_id))


@router.get("/moviesReviewed")
def get_movies_reviewed(
    user_id: str = Query(..., description="User email"),
    db: DatabaseManager = Depends(get_db),
):
    """Get the movies a user has reviewed."""
    return serialize_document(db.get_movies_reviewed_by_user(user_id))


@router.put("/reviewsUpdateUserName", response_model=StatusResponse)
def update_review_user_name(
    request: ReviewUserNameUpdate,
    db: DatabaseManager = Depends(get_db),
):
    """Change the username shown on a review."""
    if not db.edit_review_user_name(request.review_id, request.new_user_name):
        raise NotFoundError("Review", request.review_id)
    return StatusResponse(id=request.review_id)
