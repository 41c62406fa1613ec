"""
Movie request Pydantic schemas.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from api.schemas.movie import MovieForm


class MovieRequestCreate(MovieForm):
    """
    Request to have a movie added.

    Any status/active values sent by the client are ignored;
    new requests are always pending and active.
    """

    user_id: str = Field(..., description="Requester email")


class RequestOwner(BaseModel):
    """Body identifying the requester for request deletion."""

    user_id: str = Field(..., description="Requester email")


class RequestAction(BaseModel):
    """Deny or deactivate a request."""

    id: str = Field(..., description="Movie request ID")
    user_id: str = Field(..., description="Requester email")


class RequestAccept(RequestAction):
    """Accept a request for a movie that has been added."""

    title: str
    year: Union[int, str]
    genres: List[str] = Field(default_factory=list)
    rated: Optional[str] = None


class RequestListResponse(BaseModel):
    """A list of movie requests."""

    requestList: List[Dict[str, Any]]
