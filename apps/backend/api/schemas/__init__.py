"""Pydantic schemas for API request and response validation."""

from api.schemas.common import ErrorResponse, StatusResponse, SuccessResponse
from api.schemas.movie import DedupeResponse, MovieCreate, MovieForm, MovieListResponse
from api.schemas.review import (
    ReviewCreate,
    ReviewOwner,
    ReviewUpdate,
    ReviewUserNameUpdate,
)
from api.schemas.request import (
    MovieRequestCreate,
    RequestAccept,
    RequestAction,
    RequestListResponse,
    RequestOwner,
)
from api.schemas.user import (
    ChangePassword,
    ChangeProfilePicture,
    ChangeUserName,
    DeleteAccount,
    RenameResponse,
    RoleResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    "StatusResponse",
    "SuccessResponse",
    # Movie
    "DedupeResponse",
    "MovieCreate",
    "MovieForm",
    "MovieListResponse",
    # Review
    "ReviewCreate",
    "ReviewOwner",
    "ReviewUpdate",
    "ReviewUserNameUpdate",
    # Request
    "MovieRequestCreate",
    "RequestAccept",
    "RequestAction",
    "RequestListResponse",
    "RequestOwner",
    # User
    "ChangePassword",
    "ChangeProfilePicture",
    "ChangeUserName",
    "DeleteAccount",
    "RenameResponse",
    "RoleResponse",
]
