"""
Database manager for MovieDB.

Handles all document store operations including:
- Connection management with pymongo
- Movie listing, lookup and insertion
- Review CRUD with ownership checks in the update filter
- Movie request lifecycle updates
- Duplicate movie cleanup
"""

from datetime import datetime
from typing import List, Optional, Tuple, Union

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, TEXT, MongoClient
from pymongo.errors import OperationFailure

from .config import Config
from .duplicates import DUPLICATE_PIPELINE, select_duplicates
from .models import DedupeStats, DuplicateGroup, RequestStatus
from .utils import setup_logger

IdLike = Union[str, ObjectId]

MOVIE_FILTER_FIELDS = ("title", "genres", "rated", "year")


def to_object_id(value: IdLike) -> ObjectId:
    """
    Convert a string id to ObjectId.

    Raises:
        InvalidId: If the value is empty or not a valid ObjectId.
    """
    if isinstance(value, ObjectId):
        return value
    if not value:
        raise InvalidId("Empty id")
    return ObjectId(str(value))


def build_movie_query(filters: Optional[dict]) -> dict:
    """
    Build a movies query from optional filters.

    Supported filters:
    - title: phrase search against the text index
    - genres: movies containing the genre
    - rated: exact rating (G, PG, PG-13, ...)
    - year: exact release year
    """
    query = {}
    if not filters:
        return query

    # Quotes would end the phrase early
    phrase = " ".join(str(filters.get("title") or "").replace("\"", " ").split())
    if phrase:
        query["$text"] = {"$search": f"\"{phrase}\""}
    if filters.get("genres"):
        query["genres"] = {"$eq": filters["genres"]}
    if filters.get("rated"):
        query["rated"] = {"$eq": filters["rated"]}
    if filters.get("year") not in (None, ""):
        query["year"] = {"$eq": int(filters["year"])}
    return query


def movie_with_reviews_pipeline(movie_id: ObjectId) -> List[dict]:
    """Aggregation returning one movie with its reviews, newest first."""
    return [
        {"$match": {"_id": movie_id}},
        {
            "$lookup": {
                "from": "reviews",
                "let": {"id": "$_id"},
                "pipeline": [
                    {"$match": {"$expr": {"$eq": ["$movie_id", "$$id"]}}},
                    {"$sort": {"date": -1}},
                ],
                "as": "reviews",
            }
        },
    ]


class DatabaseManager:
    """
    Handles all database operations.

    Responsibilities:
    - Connection management (one pooled MongoClient per process)
    - CRUD for movies, reviews and movie_requests
    - Ownership and state guards expressed in update filters
    """

    COLLECTIONS = ["movies", "reviews", "movie_requests"]

    def __init__(self, config: Config, client: Optional[MongoClient] = None):
        self.config = config
        self.client = client or self._create_client()
        self.db = self.client[config.db_name]
        self.movies = self.db["movies"]
        self.reviews = self.db["reviews"]
        self.movie_requests = self.db["movie_requests"]
        self.logger = setup_logger("database", config.log_dir)

    def _create_client(self) -> MongoClient:
        """Create pymongo client with connection pooling."""
        return MongoClient(
            self.config.db_uri,
            maxPoolSize=self.config.db_pool_size,
            wTimeoutMS=self.config.db_wtimeout_ms,
        )

    # ============ SETUP & STATUS ============

    def ping(self) -> bool:
        """Check that the server answers."""
        self.client.admin.command("ping")
        return True

    def ensure_indexes(self) -> dict:
        """Create the indexes the API relies on. Existing indexes are kept."""
        created = []
        failed = []
        specs = [
            (self.movies, [("title", TEXT)], "movies.title_text"),
            (self.reviews, [("user_id", ASCENDING)], "reviews.user_id"),
            (self.reviews, [("movie_id", ASCENDING)], "reviews.movie_id"),
            (self.movie_requests, [("user_id", ASCENDING)], "movie_requests.user_id"),
            (self.movie_requests, [("status", ASCENDING)], "movie_requests.status"),
        ]
        for collection, keys, label in specs:
            try:
                collection.create_index(keys)
                created.append(label)
            except OperationFailure as e:
                # A collection may already carry a different text index
                self.logger.warning(f"Could not create index {label}: {e}")
                failed.append(label)
        return {"created": created, "failed": failed}

    def get_status(self) -> dict:
        """Get document counts for every collection."""
        return {
            "movies": self.movies.count_documents({}),
            "reviews": self.reviews.count_documents({}),
            "movie_requests": self.movie_requests.count_documents({}),
            "pending_requests": self.movie_requests.count_documents(
                {"status": RequestStatus.pending.value}
            ),
        }

    # ============ MOVIES ============

    def get_movies_paginated(
        self,
        filters: Optional[dict] = None,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[dict], int]:
        """
        Get a page of movies matching the filters, best rated first.

        Page 0 is treated as page 1.
        """
        if page < 1:
            page = 1
        query = build_movie_query(filters)
        cursor = (
            self.movies.find(query)
            .sort("imdb.rating", DESCENDING)
            .skip(per_page * (page - 1))
            .limit(per_page)
        )
        movies = list(cursor)
        total = self.movies.count_documents(query)
        return movies, total

    def get_movie_with_reviews(self, movie_id: IdLike) -> Optional[dict]:
        """Get a movie by id together with its reviews."""
        pipeline = movie_with_reviews_pipeline(to_object_id(movie_id))
        return next(self.movies.aggregate(pipeline), None)

    def get_genres(self) -> List[str]:
        """Get all distinct genres."""
        return sorted(g for g in self.movies.distinct("genres") if g)

    def get_rated(self) -> List[str]:
        """Get all distinct ratings (G, PG, PG-13, ...)."""
        return sorted(r for r in self.movies.distinct("rated") if r)

    def add_movie(self, movie: dict) -> ObjectId:
        """Insert a movie document and return its id."""
        result = self.movies.insert_one(movie)
        self.logger.info(f"Added movie {movie.get('title')} ({result.inserted_id})")
        return result.inserted_id

    def delete_movie(self, movie_id: IdLike) -> int:
        """Delete one movie by id. Returns the deleted count."""
        result = self.movies.delete_one({"_id": to_object_id(movie_id)})
        self.logger.info(f"Deleted movie {movie_id} ({result.deleted_count})")
        return result.deleted_count

    def find_movie(
        self,
        title: str,
        year: Optional[int] = None,
        rated: Optional[str] = None,
        genre: Optional[str] = None,
    ) -> Optional[dict]:
        """Find the most recently inserted movie matching the given fields."""
        query = {"title": title}
        if year is not None:
            query["year"] = int(year)
        if rated:
            query["rated"] = rated
        if genre:
            query["genres"] = genre
        return self.movies.find_one(query, sort=[("_id", DESCENDING)])

    def get_duplicate_groups(self) -> List[DuplicateGroup]:
        """Find groups of duplicated movies."""
        return select_duplicates(self.movies.aggregate(DUPLICATE_PIPELINE, allowDiskUse=True))

    def delete_duplicates(self, groups: Optional[List[DuplicateGroup]] = None) -> DedupeStats:
        """
        Delete duplicated movies, keeping the oldest document of each group.

        Args:
            groups: Precomputed groups (e.g. from a dry run); found if omitted
        """
        if groups is None:
            groups = self.get_duplicate_groups()

        stats = DedupeStats(groups=len(groups))
        for group in groups:
            to_delete = group.delete_ids
            result = self.movies.delete_many({"_id": {"$in": to_delete}})
            stats.deleted += result.deleted_count
            if result.deleted_count != len(to_delete):
                self.logger.warning(
                    f"Deleted {result.deleted_count}/{len(to_delete)} duplicates of {group.title}"
                )
                stats.failed_groups.append(group.title)

        self.logger.info(f"Duplicate cleanup: {stats.deleted} deleted in {stats.groups} groups")
        return stats

    # ============ REVIEWS ============

    def add_review(self, review: dict) -> ObjectId:
        """Insert a review document and return its id."""
        result = self.reviews.insert_one(review)
        return result.inserted_id

    def get_review(self, review_id: IdLike) -> Optional[dict]:
        """Get a review by id."""
        return self.reviews.find_one({"_id": to_object_id(review_id)})

    def edit_review(
        self,
        review_id: IdLike,
        user_id: str,
        text: str,
        stars: int,
        date: datetime,
    ) -> int:
        """Update a review owned by user_id. Returns the matched count."""
        result = self.reviews.update_one(
            {"_id": to_object_id(review_id), "user_id": user_id},
            {"$set": {"text": text, "date": date, "num_stars": stars}},
        )
        return result.matched_count

    def delete_review(self, review_id: IdLike, user_id: str) -> int:
        """Delete a review owned by user_id. Returns the deleted count."""
        result = self.reviews.delete_one({"_id": to_object_id(review_id), "user_id": user_id})
        return result.deleted_count

    def get_reviews_by_user(self, user_id: str) -> List[dict]:
        """Get a user's reviews, highest rated first."""
        return list(self.reviews.find({"user_id": user_id}).sort("num_stars", DESCENDING))

    def get_movies_reviewed_by_user(self, user_id: str) -> List[dict]:
        """Get every movie the user has reviewed, with its reviews."""
        movies = []
        for review in self.get_reviews_by_user(user_id):
            movie = self.get_movie_with_reviews(review["movie_id"])
            if movie:
                movies.append(movie)
        return movies

    def edit_review_user_name(self, review_id: IdLike, name: str) -> int:
        """Change the username shown on one review. Returns the matched count."""
        result = self.reviews.update_one(
            {"_id": to_object_id(review_id)},
            {"$set": {"name": name}},
        )
        return result.matched_count

    def rename_user_reviews(self, user_id: str, name: str) -> int:
        """Change the username shown on all of a user's reviews."""
        result = self.reviews.update_many({"user_id": user_id}, {"$set": {"name": name}})
        return result.modified_count

    # ============ MOVIE REQUESTS ============

    def add_request(self, request: dict) -> ObjectId:
        """Insert a movie request document and return its id."""
        result = self.movie_requests.insert_one(request)
        self.logger.info(
            f"Movie request added: {request.get('title')} by {request.get('user_id')}"
        )
        return result.inserted_id

    def get_request(self, request_id: IdLike) -> Optional[dict]:
        """Get a movie request by id."""
        return self.movie_requests.find_one({"_id": to_object_id(request_id)})

    def get_user_requests(self, user_id: str, active_only: bool = False) -> List[dict]:
        """Get the requests a user has made."""
        query = {"user_id": {"$eq": user_id}}
        if active_only:
            query["active"] = True
        return list(self.movie_requests.find(query))

    def get_all_requests(self, status: Optional[str] = None, limit: int = 0) -> List[dict]:
        """Get all movie requests, optionally by status, oldest first."""
        query = {"status": status} if status else {}
        return list(self.movie_requests.find(query).sort("lastupdated", ASCENDING).limit(limit))

    def delete_request(self, request_id: IdLike, user_id: str) -> int:
        """Delete a request made by user_id. Returns the deleted count."""
        result = self.movie_requests.delete_one(
            {"_id": to_object_id(request_id), "user_id": user_id}
        )
        return result.deleted_count

    def deny_request(self, request_id: IdLike, user_id: str) -> int:
        """Move a pending request to denied. Returns the matched count."""
        result = self.movie_requests.update_one(
            {
                "_id": to_object_id(request_id),
                "user_id": user_id,
                "status": RequestStatus.pending.value,
            },
            {"$set": {"status": RequestStatus.denied.value}},
        )
        return result.matched_count

    def accept_request(self, request_id: IdLike, user_id: str, movie_id: IdLike) -> int:
        """Move a pending request to accepted and link the movie. Returns the matched count."""
        result = self.movie_requests.update_one(
            {
                "_id": to_object_id(request_id),
                "user_id": user_id,
                "status": RequestStatus.pending.value,
            },
            {"$set": {
                "status": RequestStatus.accepted.value,
                "movie_id": to_object_id(movie_id),
            }},
        )
        return result.matched_count

    def deactivate_request(self, request_id: IdLike, user_id: str) -> int:
        """Hide a request from the user's profile. Returns the matched count."""
        result = self.movie_requests.update_one(
            {"_id": to_object_id(request_id), "user_id": user_id},
            {"$set": {"active": False}},
        )
        return result.matched_count
