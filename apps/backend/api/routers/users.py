"""
User profile endpoints.

Accounts live with the identity provider; these endpoints forward
profile changes through the management API. Users are addressed by
email for lookups and by the provider's user ID for changes.
"""

import logging

from fastapi import APIRouter, Depends, Query
from pymongo.errors import PyMongoError

from api.dependencies import get_db, get_identity_client
from api.schemas.common import SuccessResponse
from api.schemas.user import (
    ChangePassword,
    ChangeProfilePicture,
    ChangeUserName,
    DeleteAccount,
    RenameResponse,
    RoleResponse,
)
from moviedb.database import DatabaseManager
from moviedb.identity import IdentityClient

router = APIRouter()
logger = logging.getLogger("api.users")


@router.get("/userData")
def get_user_data(
    email: str = Query(..., description="User email"),
    identity: IdentityClient = Depends(get_identity_client),
):
    """Get the identity provider's records for a user."""
    return identity.get_user_by_email(email)


@router.get("/role", response_model=RoleResponse)
def get_user_role(
    email: str = Query(..., description="User email"),
    identity: IdentityClient = Depends(get_identity_client),
):
    """Check whether a user is an admin."""
    return RoleResponse(isAdmin=identity.is_admin(email))


@router.put("/changeUserName", response_model=RenameResponse)
def change_user_name(
    request: ChangeUserName,
    identity: IdentityClient = Depends(get_identity_client),
    db: DatabaseManager = Depends(get_db),
):
    """
    Change a user's display name.

    When the user's email is given, the name shown on their reviews is
    updated too. That update is best-effort: a failure is logged and the
    provider-side rename still counts as success.
    """
    success = identity.change_user_name(request.user_id, request.user_name)
    reviews_updated = 0

    if success and request.email:
        try:
            reviews_updated = db.rename_user_reviews(request.email, request.user_name)
        except PyMongoError as e:
            logger.warning(f"Review rename failed for {request.email}: {e}")

    logger.info(
        f"Username change: user_id={request.user_id} success={success} "
        f"reviews_updated={reviews_updated}"
    )
    return RenameResponse(success=success, reviews_updated=reviews_updated)


@router.put("/changePassword", response_model=SuccessResponse)
def change_password(
    request: ChangePassword,
    identity: IdentityClient = Depends(get_identity_client),
):
    """Send the user a password reset email."""
    return SuccessResponse(success=identity.change_password(request.user_email))


@router.put("/changepfp", response_model=SuccessResponse)
def change_profile_picture(
    request: ChangeProfilePicture,
    identity: IdentityClient = Depends(get_identity_client),
):
    """Change a user's profile picture."""
    return SuccessResponse(success=identity.change_profile_picture(request.user_id, request.profile_pic))


@router.put("/account", response_model=SuccessResponse)
def delete_account(
    request: DeleteAccount,
    identity: IdentityClient = Depends(get_identity_client),
):
    """Delete a user's account."""
    success = identity.delete_user(request.user_id)
    logger.info(f"Account deleted: user_id={request.user_id}")
    return SuccessResponse(success=success)
