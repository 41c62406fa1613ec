"""
User-related Pydantic schemas.

Field aliases match the camelCase names the frontend sends.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ChangeUserName(BaseModel):
    """Request to change a user's display name."""

    user_id: str = Field(..., description="Identity provider user ID")
    user_name: str = Field(..., alias="userName", min_length=1)
    email: Optional[str] = Field(None, description="Email used to rename the user's reviews")

    class Config:
        populate_by_name = True


class ChangePassword(BaseModel):
    """Request a password reset email."""

    user_email: str = Field(..., alias="userEmail")

    class Config:
        populate_by_name = True


class ChangeProfilePicture(BaseModel):
    """Request to change a user's profile picture."""

    user_id: str = Field(..., description="Identity provider user ID")
    profile_pic: str = Field(..., alias="profilePic", description="Picture URL")

    class Config:
        populate_by_name = True


class DeleteAccount(BaseModel):
    """Request to delete a user's account."""

    user_id: str = Field(..., description="Identity provider user ID")


class RoleResponse(BaseModel):
    """Whether the user is an admin."""

    isAdmin: bool


class RenameResponse(BaseModel):
    """Outcome of a username change."""

    success: bool
    reviews_updated: int = 0
