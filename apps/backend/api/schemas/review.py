"""
Review-related Pydantic schemas.
"""

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    """Request to post a review."""

    movie_id: str = Field(..., description="Reviewed movie ID")
    user_id: str = Field(..., description="Reviewer email")
    name: str = Field(..., description="Reviewer display name")
    text: str = Field(..., description="Review text")
    stars: int = Field(..., ge=1, le=5, description="Star rating (1-5)")


class ReviewUpdate(BaseModel):
    """Request to edit a review."""

    review_id: str = Field(..., description="Review ID")
    user_id: str = Field(..., description="Email of the review's author")
    text: str = Field(..., description="New review text")
    stars: int = Field(..., ge=1, le=5, description="New star rating (1-5)")


class ReviewOwner(BaseModel):
    """Body identifying the requester for review deletion."""

    user_id: str = Field(..., description="Email of the review's author")


class ReviewUserNameUpdate(BaseModel):
    """Request to change the username shown on a review."""

    review_id: str
    new_user_name: str = Field(..., alias="newUserName", min_length=1)

    class Config:
        populate_by_name = True
