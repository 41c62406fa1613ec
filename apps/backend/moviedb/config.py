"""
Configuration management for MovieDB.

Loads configuration from environment variables and provides
a centralized Config dataclass for all settings.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


@dataclass
class Config:
    """Centralized configuration from environment variables."""

    # Database
    db_uri: str
    db_name: str = "sample_mflix"
    db_pool_size: int = 25
    db_wtimeout_ms: int = 2500

    # Identity provider (Auth0 management API)
    auth0_base: str = ""
    auth0_client_id: str = ""
    auth0_client_secret: str = ""
    app_client_id: str = ""  # SPA client, used for password reset emails
    auth0_connection: str = "Username-Password-Authentication"
    admin_role_name: str = "MovieDB Admin"
    request_timeout: int = 10

    # Listing
    movies_per_page: int = 20

    # Paths
    project_dir: Path = field(default_factory=Path.cwd)
    log_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")
    log_level: str = "INFO"

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    @classmethod
    def from_env(cls, env_path: Optional[str] = None) -> "Config":
        """
        Load configuration from environment variables.

        Args:
            env_path: Optional path to .env file. If not provided,
                     looks for .env in repository root, then current directory.

        Returns:
            Config instance with loaded values.

        Raises:
            ValueError: If required environment variables are missing.
        """
        if env_path:
            load_dotenv(env_path)
        else:
            # Repository root is three levels above this package
            root_env = Path(__file__).parent.parent.parent.parent / ".env"
            if root_env.exists():
                load_dotenv(root_env)
            else:
                load_dotenv()

        db_uri = os.getenv("MOVIEREVIEWS_DB_URI")
        if not db_uri:
            raise ValueError("MOVIEREVIEWS_DB_URI environment variable is required")

        db_name = os.getenv("MOVIEREVIEWS_NS", "sample_mflix")
        db_pool_size = int(os.getenv("DB_POOL_SIZE", "25"))
        db_wtimeout_ms = int(os.getenv("DB_WTIMEOUT_MS", "2500"))

        # Identity provider
        auth0_base = os.getenv("AUTH0_BASE", "").rstrip("/")
        auth0_client_id = os.getenv("CLIENT_ID", "")
        auth0_client_secret = os.getenv("CLIENT", "")
        app_client_id = os.getenv("MOVIEDB_CLIENT_ID", "")
        auth0_connection = os.getenv("AUTH0_CONNECTION", "Username-Password-Authentication")
        admin_role_name = os.getenv("ADMIN_ROLE_NAME", "MovieDB Admin")
        request_timeout = int(os.getenv("AUTH0_TIMEOUT", "10"))

        movies_per_page = int(os.getenv("MOVIES_PER_PAGE", "20"))
        project_dir = Path(os.getenv("PROJECT_DIR", Path.cwd()))
        log_dir = Path(os.getenv("LOG_DIR", project_dir / "logs"))
        log_level = os.getenv("API_LOG_LEVEL", "INFO").upper()

        # API settings
        api_host = os.getenv("API_HOST", "0.0.0.0")
        api_port = int(os.getenv("API_PORT", "8000"))
        api_debug = os.getenv("API_DEBUG", "false").lower() == "true"

        return cls(
            db_uri=db_uri,
            db_name=db_name,
            db_pool_size=db_pool_size,
            db_wtimeout_ms=db_wtimeout_ms,
            auth0_base=auth0_base,
            auth0_client_id=auth0_client_id,
            auth0_client_secret=auth0_client_secret,
            app_client_id=app_client_id,
            auth0_connection=auth0_connection,
            admin_role_name=admin_role_name,
            request_timeout=request_timeout,
            movies_per_page=movies_per_page,
            project_dir=project_dir,
            log_dir=log_dir,
            log_level=log_level,
            api_host=api_host,
            api_port=api_port,
            api_debug=api_debug,
        )

    @property
    def management_audience(self) -> str:
        """Audience string for management API tokens."""
        return f"{self.auth0_base}/api/v2/"

    def get_auth0_headers(self, access_token: Optional[str] = None) -> dict:
        """Get headers for identity provider requests."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers
