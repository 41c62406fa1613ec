"""
Identity provider client for MovieDB.

Talks to the Auth0 Management API on behalf of the backend:
- Client-credentials token exchange (token cached until shortly before expiry)
- User lookup, profile updates, account deletion and role checks
- Password reset emails through the database connection endpoint

Management tokens never leave the backend.
"""

import time
from typing import List, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import Config
from .utils import setup_logger

PASSWORD_RESET_MESSAGE = "We've just sent you an email to reset your password."
USER_ID_PREFIX = "auth0|"


class IdentityProviderError(Exception):
    """Raised when the identity provider cannot be reached or rejects a call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def format_user_id(user_id: str) -> str:
    """
    Build the URL path segment for a provider user id.

    Accepts either the full id ('auth0|abc') or the bare part after '|'.
    """
    if "|" not in user_id:
        user_id = f"{USER_ID_PREFIX}{user_id}"
    return quote(user_id, safe="")


class IdentityClient:
    """
    Handles all identity provider interactions.

    Responsibilities:
    - Management API token caching
    - Retry of idempotent reads on 429/5xx
    - Mapping provider failures to IdentityProviderError
    """

    # Refresh the token this many seconds before it expires
    TOKEN_EXPIRY_MARGIN = 60

    def __init__(self, config: Config, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or self._create_session()
        self.logger = setup_logger("identity", config.log_dir)
        self._token: Optional[str] = None
        self._token_expires_at: float = 0

    def _create_session(self) -> requests.Session:
        """Create requests session with retry configuration."""
        session = requests.Session()

        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send a request, raising IdentityProviderError on failure."""
        kwargs.setdefault("timeout", self.config.request_timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            self.logger.error(f"{method} {url} failed: {e}")
            raise IdentityProviderError(f"Identity provider unreachable: {e}")

        if not response.ok:
            self.logger.error(f"{method} {url} returned {response.status_code}: {response.text[:200]}")
            raise IdentityProviderError(
                f"Identity provider returned {response.status_code}",
                status_code=response.status_code,
            )
        return response

    def get_token(self, force_refresh: bool = False) -> str:
        """
        Get a Management API access token via the client-credentials grant.

        Args:
            force_refresh: Ignore the cached token

        Returns:
            Bearer access token
        """
        now = time.time()
        if not force_refresh and self._token and now < self._token_expires_at:
            return self._token

        response = self._send(
            "POST",
            f"{self.config.auth0_base}/oauth/token",
            json={
                "grant_type": "client_credentials",
                "client_id": self.config.auth0_client_id,
                "client_secret": self.config.auth0_client_secret,
                "audience": self.config.management_audience,
            },
            headers=self.config.get_auth0_headers(),
        )
        data = response.json()
        token = data.get("access_token")
        if not token:
            raise IdentityProviderError("Token response did not include an access token")

        expires_in = int(data.get("expires_in") or 0)
        self._token = token
        self._token_expires_at = now + max(expires_in - self.TOKEN_EXPIRY_MARGIN, 0)
        self.logger.info(f"Obtained management token (expires in {expires_in}s)")
        return token

    def _management(self, method: str, path: str, **kwargs) -> requests.Response:
        """Call a Management API endpoint with a bearer token."""
        headers = self.config.get_auth0_headers(self.get_token())
        headers["Cache-Control"] = "no-cache"
        return self._send(
            method,
            f"{self.config.auth0_base}/api/v2{path}",
            headers=headers,
            **kwargs,
        )

    # ============ USERS ============

    def get_user_by_email(self, email: str) -> List[dict]:
        """Look up users by email. Returns an empty list if none match."""
        response = self._management(
            "GET",
            "/users",
            params={"q": f'email:"{email}"', "search_engine": "v3"},
        )
        return response.json()

    def change_user_name(self, user_id: str, user_name: str) -> bool:
        """Change a user's nickname. True if the provider echoes the new name."""
        response = self._management(
            "PATCH",
            f"/users/{format_user_id(user_id)}",
            json={"nickname": user_name},
        )
        changed = response.json().get("nickname") == user_name
        self.logger.info(f"Username change for {user_id}: {'ok' if changed else 'not applied'}")
        return changed

    def change_profile_picture(self, user_id: str, picture_url: str) -> bool:
        """Change a user's profile picture. True if the provider echoes the new link."""
        response = self._management(
            "PATCH",
            f"/users/{format_user_id(user_id)}",
            json={"picture": picture_url},
        )
        return response.json().get("picture") == picture_url

    def delete_user(self, user_id: str) -> bool:
        """Delete a user account."""
        self._management("DELETE", f"/users/{format_user_id(user_id)}")
        self.logger.info(f"Deleted account {user_id}")
        return True

    def change_password(self, email: str) -> bool:
        """
        Ask the provider to email a password reset link.

        Returns:
            True if the provider confirms the email was sent
        """
        response = self._send(
            "POST",
            f"{self.config.auth0_base}/dbconnections/change_password",
            json={
                "client_id": self.config.app_client_id,
                "email": email,
                "connection": self.config.auth0_connection,
            },
            headers=self.config.get_auth0_headers(),
        )
        message = response.text.strip().strip('"')
        return message == PASSWORD_RESET_MESSAGE

    # ============ ROLES ============

    def get_roles(self, user_id: str) -> List[dict]:
        """Get the roles assigned to a user."""
        response = self._management("GET", f"/users/{format_user_id(user_id)}/roles")
        return response.json()

    def is_admin(self, email: str) -> bool:
        """Check whether the user with this email holds the admin role."""
        users = self.get_user_by_email(email)
        if not users:
            return False

        # The provider keys users by its own id, not by email
        roles = self.get_roles(users[0]["user_id"])
        return any(role.get("name") == self.config.admin_role_name for role in roles)
