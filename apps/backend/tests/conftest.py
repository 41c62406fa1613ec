"""
Shared fixtures for MovieDB backend tests.

Provides mock database, mock identity provider client, and sample data.
"""

import logging
import pytest
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from unittest.mock import MagicMock

from bson import ObjectId
from fastapi.testclient import TestClient

from moviedb.database import to_object_id
from moviedb.duplicates import select_duplicates
from moviedb.identity import IdentityProviderError
from moviedb.models import DedupeStats, DuplicateGroup, ImdbInfo, MovieData, RequestStatus


# =============================================================================
# SAMPLE DATA
# =============================================================================

def create_sample_movie(
    title: str,
    year: int,
    genres: Optional[List[str]] = None,
    rated: str = "PG-13",
    rating: float = 7.5,
    fullplot: Optional[str] = None,
) -> MovieData:
    """Create a sample MovieData for testing."""
    return MovieData(
        title=title,
        year=year,
        fullplot=fullplot or f"This is the full plot of {title}.",
        genres=genres or ["Action", "Drama"],
        runtime=120,
        released=datetime(year, 6, 1),
        rated=rated,
        imdb=ImdbInfo(rating=rating, votes=1000, id=year * 10),
        poster=f"https://example.com/{title.lower().replace(' ', '_')}.jpg",
    )


SAMPLE_MOVIES = [
    create_sample_movie("Fight Club", 1999, ["Drama", "Thriller"], "R", 8.8),
    create_sample_movie("Inception", 2010, ["Action", "Sci-Fi", "Thriller"], "PG-13", 8.8),
    create_sample_movie("The Dark Knight", 2008, ["Action", "Crime", "Drama"], "PG-13", 9.0),
    create_sample_movie("Pulp Fiction", 1994, ["Crime", "Thriller"], "R", 8.9),
    create_sample_movie("Toy Story", 1995, ["Animation", "Comedy"], "G", 8.3),
]

SAMPLE_REQUEST_FORM = {
    "title": "Arrival",
    "year": "2016",
    "fullplot": "A linguist works with the military to communicate with alien lifeforms.",
    "genres": ["Drama", "Sci-Fi"],
    "runtime": "116",
    "released": "2016-11-11",
    "rated": "PG-13",
}


# =============================================================================
# MOCK DATABASE
# =============================================================================

class MockDatabaseManager:
    """In-memory mock database for testing."""

    def __init__(self):
        self.movies: Dict[ObjectId, dict] = {}
        self.reviews: Dict[ObjectId, dict] = {}
        self.movie_requests: Dict[ObjectId, dict] = {}
        self.indexes_created = False
        self.logger = logging.getLogger("moviedb.mock")

    def reset(self):
        """Reset all data."""
        self.movies.clear()
        self.reviews.clear()
        self.movie_requests.clear()
        self.indexes_created = False

    # Setup & Status
    def ping(self) -> bool:
        return True

    def ensure_indexes(self) -> dict:
        self.indexes_created = True
        return {"created": ["movies.title_text", "reviews.user_id"], "failed": []}

    def get_status(self) -> dict:
        return {
            "movies": len(self.movies),
            "reviews": len(self.reviews),
            "movie_requests": len(self.movie_requests),
            "pending_requests": len(
                [r for r in self.movie_requests.values() if r["status"] == RequestStatus.pending.value]
            ),
        }

    # Movies
    def get_movies_paginated(
        self,
        filters: Optional[dict] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[dict], int]:
        filters = filters or {}
        movies = list(self.movies.values())
        if filters.get("title"):
            movies = [m for m in movies if filters["title"].lower() in m["title"].lower()]
        if filters.get("genres"):
            movies = [m for m in movies if filters["genres"] in m.get("genres", [])]
        if filters.get("rated"):
            movies = [m for m in movies if m.get("rated") == filters["rated"]]
        if filters.get("year") is not None:
            movies = [m for m in movies if m.get("year") == int(filters["year"])]
        movies.sort(key=lambda m: (m.get("imdb") or {}).get("rating") or 0, reverse=True)
        total = len(movies)
        start = (max(page, 1) - 1) * per_page
        return [dict(m) for m in movies[start:start + per_page]], total

    def get_movie_with_reviews(self, movie_id) -> Optional[dict]:
        movie = self.movies.get(to_object_id(movie_id))
        if not movie:
            return None
        reviews = [r for r in self.reviews.values() if r["movie_id"] == movie["_id"]]
        reviews.sort(key=lambda r: r["date"], reverse=True)
        return dict(movie, reviews=reviews)

    def get_genres(self) -> List[str]:
        return sorted({g for m in self.movies.values() for g in m.get("genres", [])})

    def get_rated(self) -> List[str]:
        return sorted({m["rated"] for m in self.movies.values() if m.get("rated")})

    def add_movie(self, movie: dict) -> ObjectId:
        movie_id = ObjectId()
        self.movies[movie_id] = dict(movie, _id=movie_id)
        return movie_id

    def delete_movie(self, movie_id) -> int:
        return 1 if self.movies.pop(to_object_id(movie_id), None) is not None else 0

    def find_movie(
        self,
        title: str,
        year: Optional[int] = None,
        rated: Optional[str] = None,
        genre: Optional[str] = None,
    ) -> Optional[dict]:
        matches = [
            m for m in self.movies.values()
            if m["title"] == title
            and (year is None or m.get("year") == int(year))
            and (not rated or m.get("rated") == rated)
            and (not genre or genre in m.get("genres", []))
        ]
        if not matches:
            return None
        return max(matches, key=lambda m: m["_id"])

    def get_duplicate_groups(self) -> List[DuplicateGroup]:
        by_plot: Dict[Optional[str], dict] = {}
        for movie in self.movies.values():
            group = by_plot.setdefault(
                movie.get("fullplot"),
                {"_id": movie.get("fullplot"), "movieIds": [], "titles": [], "years": []},
            )
            group["movieIds"].append(movie["_id"])
            # $addToSet skips fields missing from a document
            for field, values in (("title", group["titles"]), ("year", group["years"])):
                if field in movie and movie[field] not in values:
                    values.append(movie[field])
        return select_duplicates(g for g in by_plot.values() if len(g["movieIds"]) > 1)

    def delete_duplicates(self, groups: Optional[List[DuplicateGroup]] = None) -> DedupeStats:
        if groups is None:
            groups = self.get_duplicate_groups()
        stats = DedupeStats(groups=len(groups))
        for group in groups:
            deleted = 0
            for movie_id in group.delete_ids:
                if self.movies.pop(movie_id, None) is not None:
                    deleted += 1
            stats.deleted += deleted
            if deleted != len(group.delete_ids):
                stats.failed_groups.append(group.title)
        return stats

    # Reviews
    def add_review(self, review: dict) -> ObjectId:
        review_id = ObjectId()
        self.reviews[review_id] = dict(review, _id=review_id)
        return review_id

    def get_review(self, review_id) -> Optional[dict]:
        return self.reviews.get(to_object_id(review_id))

    def edit_review(self, review_id, user_id: str, text: str, stars: int, date: datetime) -> int:
        review = self.reviews.get(to_object_id(review_id))
        if not review or review["user_id"] != user_id:
            return 0
        review.update({"text": text, "num_stars": stars, "date": date})
        return 1

    def delete_review(self, review_id, user_id: str) -> int:
        review_id = to_object_id(review_id)
        review = self.reviews.get(review_id)
        if not review or review["user_id"] != user_id:
            return 0
        del self.reviews[review_id]
        return 1

    def get_reviews_by_user(self, user_id: str) -> List[dict]:
        reviews = [r for r in self.reviews.values() if r["user_id"] == user_id]
        return sorted(reviews, key=lambda r: r["num_stars"], reverse=True)

    def get_movies_reviewed_by_user(self, user_id: str) -> List[dict]:
        movies = []
        for review in self.get_reviews_by_user(user_id):
            movie = self.get_movie_with_reviews(review["movie_id"])
            if movie:
                movies.append(movie)
        return movies

    def edit_review_user_name(self, review_id, name: str) -> int:
        review = self.reviews.get(to_object_id(review_id))
        if not review:
            return 0
        review["name"] = name
        return 1

    def rename_user_reviews(self, user_id: str, name: str) -> int:
        modified = 0
        for review in self.reviews.values():
            if review["user_id"] == user_id and review["name"] != name:
                review["name"] = name
                modified += 1
        return modified

    # Movie requests
    def add_request(self, request: dict) -> ObjectId:
        request_id = ObjectId()
        self.movie_requests[request_id] = dict(request, _id=request_id)
        return request_id

    def get_request(self, request_id) -> Optional[dict]:
        return self.movie_requests.get(to_object_id(request_id))

    def get_user_requests(self, user_id: str, active_only: bool = False) -> List[dict]:
        return [
            r for r in self.movie_requests.values()
            if r["user_id"] == user_id and (r["active"] or not active_only)
        ]

    def get_all_requests(self, status: Optional[str] = None, limit: int = 0) -> List[dict]:
        requests_list = [
            r for r in self.movie_requests.values()
            if status is None or r["status"] == status
        ]
        requests_list.sort(key=lambda r: r["lastupdated"])
        return requests_list[:limit] if limit else requests_list

    def _owned(self, request_id, user_id: str, pending_only: bool = False) -> Optional[dict]:
        request = self.get_request(request_id)
        if not request or request["user_id"] != user_id:
            return None
        if pending_only and request["status"] != RequestStatus.pending.value:
            return None
        return request

    def delete_request(self, request_id, user_id: str) -> int:
        request = self._owned(request_id, user_id)
        if not request:
            return 0
        del self.movie_requests[request["_id"]]
        return 1

    def deny_request(self, request_id, user_id: str) -> int:
        request = self._owned(request_id, user_id, pending_only=True)
        if not request:
            return 0
        request["status"] = RequestStatus.denied.value
        return 1

    def accept_request(self, request_id, user_id: str, movie_id) -> int:
        request = self._owned(request_id, user_id, pending_only=True)
        if not request:
            return 0
        request["status"] = RequestStatus.accepted.value
        request["movie_id"] = to_object_id(movie_id)
        return 1

    def deactivate_request(self, request_id, user_id: str) -> int:
        request = self._owned(request_id, user_id)
        if not request:
            return 0
        request["active"] = False
        return 1


# =============================================================================
# MOCK IDENTITY CLIENT
# =============================================================================

class MockIdentityClient:
    """Mock identity provider client backed by a dict of users."""

    def __init__(self):
        self.users: Dict[str, dict] = {
            "auth0|alice": {
                "user_id": "auth0|alice",
                "email": "alice@example.com",
                "nickname": "alice",
                "picture": "https://example.com/alice.png",
            },
            "auth0|admin": {
                "user_id": "auth0|admin",
                "email": "admin@example.com",
                "nickname": "admin",
                "picture": "https://example.com/admin.png",
            },
        }
        self.roles: Dict[str, List[dict]] = {"auth0|admin": [{"name": "MovieDB Admin"}]}
        self.reset_emails: List[str] = []
        self.connection_ok = True

    def _user(self, user_id: str) -> dict:
        if "|" not in user_id:
            user_id = f"auth0|{user_id}"
        if user_id not in self.users:
            raise IdentityProviderError("Identity provider returned 404", status_code=404)
        return self.users[user_id]

    def get_token(self, force_refresh: bool = False) -> str:
        if not self.connection_ok:
            raise IdentityProviderError("Identity provider unreachable")
        return "mock-token"

    def get_user_by_email(self, email: str) -> List[dict]:
        return [u for u in self.users.values() if u["email"] == email]

    def change_user_name(self, user_id: str, user_name: str) -> bool:
        self._user(user_id)["nickname"] = user_name
        return True

    def change_profile_picture(self, user_id: str, picture_url: str) -> bool:
        self._user(user_id)["picture"] = picture_url
        return True

    def delete_user(self, user_id: str) -> bool:
        user = self._user(user_id)
        del self.users[user["user_id"]]
        return True

    def change_password(self, email: str) -> bool:
        self.reset_emails.append(email)
        return True

    def get_roles(self, user_id: str) -> List[dict]:
        return self.roles.get(self._user(user_id)["user_id"], [])

    def is_admin(self, email: str) -> bool:
        users = self.get_user_by_email(email)
        if not users:
            return False
        return any(r["name"] == "MovieDB Admin" for r in self.get_roles(users[0]["user_id"]))


# =============================================================================
# HELPERS
# =============================================================================

def movie_id_for(db: MockDatabaseManager, title: str) -> str:
    """ID of a stored movie, as the frontend would send it."""
    return str(db.find_movie(title)["_id"])


def add_sample_request(
    db: MockDatabaseManager,
    user_id: str = "alice@example.com",
    title: str = "Arrival",
    status: RequestStatus = RequestStatus.pending,
    active: bool = True,
    age_minutes: int = 0,
) -> str:
    """Insert a movie request document directly and return its ID."""
    doc = {
        "title": title,
        "year": 2016,
        "fullplot": f"Plot of {title}.",
        "genres": ["Drama", "Sci-Fi"],
        "runtime": 116,
        "released": datetime(2016, 11, 11),
        "rated": "PG-13",
        "poster": None,
        "lastupdated": datetime(2024, 1, 1) + timedelta(minutes=age_minutes),
        "type": "movie",
        "user_id": user_id,
        "status": status.value,
        "active": active,
    }
    return str(db.add_request(doc))


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def mock_db():
    """Provide a fresh mock database for each test."""
    return MockDatabaseManager()


@pytest.fixture
def mock_db_with_data(mock_db):
    """Mock database pre-populated with sample movies."""
    mock_db.indexes_created = True
    for movie in SAMPLE_MOVIES:
        mock_db.add_movie(movie.to_document())
    return mock_db


@pytest.fixture
def mock_identity():
    """Provide mock identity provider client."""
    return MockIdentityClient()


@pytest.fixture
def api_client(mock_db_with_data, mock_identity, tmp_path):
    """Provide FastAPI test client with mocked dependencies."""
    from api.main import app
    from api import dependencies

    # Clear any cached config/db from previous runs
    dependencies.get_config.cache_clear()
    dependencies.get_db.cache_clear()
    dependencies.get_identity_client.cache_clear()

    # Override dependencies
    def get_mock_db():
        return mock_db_with_data

    def get_mock_config():
        config = MagicMock()
        config.movies_per_page = 20
        config.log_dir = tmp_path
        config.log_level = "INFO"
        return config

    def get_mock_identity():
        return mock_identity

    app.dependency_overrides[dependencies.get_db] = get_mock_db
    app.dependency_overrides[dependencies.get_config] = get_mock_config
    app.dependency_overrides[dependencies.get_identity_client] = get_mock_identity

    with TestClient(app) as client:
        yield client

    # Clean up overrides
    app.dependency_overrides.clear()
