"""
Movie request endpoints.

Users submit requests for movies missing from the catalogue; admins
deny or accept them. A request can only leave the pending state once.
Deactivation hides a request from its owner's profile and is independent
of its status.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from api.dependencies import get_approval_manager, get_db
from api.exceptions import ValidationError, raise_for_transition
from api.schemas.common import StatusResponse
from api.schemas.request import (
    MovieRequestCreate,
    RequestAccept,
    RequestAction,
    RequestListResponse,
    RequestOwner,
)
from moviedb.approval import ApprovalManager
from moviedb.database import DatabaseManager
from moviedb.models import MovieRequestData, RequestStatus, serialize_document

router = APIRouter()
logger = logging.getLogger("api.movie_requests")


@router.post("/addRequest", response_model=StatusResponse)
def add_request(
    request: MovieRequestCreate,
    db: DatabaseManager = Depends(get_db),
):
    """Submit a request to add a movie. New requests are pending and active."""
    try:
        movie_request = MovieRequestData.from_form(request.model_dump(), request.user_id)
    except ValueError as e:
        raise ValidationError(str(e))

    request_id = db.add_request(movie_request.to_document())
    logger.info(f"Movie request submitted: {request.title} by {request.user_id} id={request_id}")
    return StatusResponse(id=str(request_id))


@router.get("/getRequests", response_model=RequestListResponse)
def get_user_requests(
    email: str = Query(..., description="Requester email"),
    active_only: bool = Query(False, description="Hide deactivated requests"),
    db: DatabaseManager = Depends(get_db),
):
    """Get the requests a user has made."""
    requests_list = db.get_user_requests(email, active_only=active_only)
    return {"requestList": serialize_document(requests_list)}


@router.get("/reviewRequests", response_model=RequestListResponse)
def get_all_requests(
    status: Optional[RequestStatus] = Query(None, description="Filter by status"),
    db: DatabaseManager = Depends(get_db),
):
    """Get all movie requests for admin review."""
    requests_list = db.get_all_requests(status=status.value if status else None)
    return {"requestList": serialize_document(requests_list)}


@router.delete("/deleteRequest", response_model=StatusResponse)
def delete_request(
    request_id: str = Query(..., alias="id", description="Movie request ID"),
    owner: RequestOwner = Body(...),
    approval: ApprovalManager = Depends(get_approval_manager),
):
    """Delete a request. Only the user who made it may delete it."""
    raise_for_transition(approval.delete(request_id, owner.user_id), request_id)
    return StatusResponse(id=request_id)


@router.put("/denyRequest", response_model=StatusResponse)
def deny_request(
    request: RequestAction,
    approval: ApprovalManager = Depends(get_approval_manager),
):
    """Deny a pending request."""
    raise_for_transition(approval.deny(request.id, request.user_id), request.id)
    return StatusResponse(id=request.id)


@router.put("/deactivateRequest", response_model=StatusResponse)
def deactivate_request(
    request: RequestAction,
    approval: ApprovalManager = Depends(get_approval_manager),
):
    """Hide a request from its owner's profile."""
    raise_for_transition(approval.deactivate(request.id, request.user_id), request.id)
    return StatusResponse(id=request.id)


@router.put("/acceptRequest", response_model=StatusResponse)
def accept_request(
    request: RequestAccept,
    approval: ApprovalManager = Depends(get_approval_manager),
):
    """
    Accept a pending request.

    The movie must already have been added through /addMovie; it is
    located by title, year, rating and first genre and its ID is stored
    on the request.
    """
    try:
        year = int(request.year)
    except ValueError:
        raise ValidationError(f"Invalid year: {request.year!r}")

    result, movie_id = approval.accept_with_lookup(
        request.id,
        request.user_id,
        title=request.title,
        year=year,
        genres=request.genres,
        rated=request.rated,
    )
    raise_for_transition(result, request.id)
    return StatusResponse(id=str(movie_id))
