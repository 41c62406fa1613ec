"""
Data models for MovieDB.

Provides dataclasses for type-safe handling of movie, review and
movie request documents, plus helpers to turn documents into JSON.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional, Union

from bson import ObjectId


class RequestStatus(str, Enum):
    """Lifecycle status of a movie request."""

    pending = "pending"
    denied = "denied"
    accepted = "accepted"


def parse_released(value: Union[str, date, datetime]) -> datetime:
    """
    Parse a release date given as 'YYYY-MM-DD'. A trailing time part is ignored.

    Raises:
        ValueError: If the value is not a valid date.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        year, month, day = (int(part) for part in str(value).strip()[:10].split("-"))
    except (TypeError, ValueError):
        raise ValueError(f"Invalid release date: {value!r}")
    return datetime(year, month, day)


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(float(value))


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _to_genres(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [g.strip() for g in value.split(",") if g.strip()]
    return [str(g) for g in value]


@dataclass
class ImdbInfo:
    """IMDb rating, vote count and numeric id."""

    rating: Optional[float] = None
    votes: Optional[int] = None
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {"rating": self.rating, "votes": self.votes, "id": self.id}

    @classmethod
    def parse(cls, value: Any) -> "ImdbInfo":
        """
        Parse the form representation 'rating,votes,id'.

        Lists are accepted too. Missing or empty parts become None.
        """
        if value is None:
            return cls()
        if isinstance(value, dict):
            return cls(
                rating=_to_float(value.get("rating")),
                votes=_to_int(value.get("votes")),
                id=_to_int(value.get("id")),
            )
        if isinstance(value, (list, tuple)):
            parts = [str(v) for v in value]
        else:
            parts = str(value).split(",")
        parts = [p.strip() for p in parts] + [""] * 3
        return cls(
            rating=_to_float(parts[0]),
            votes=_to_int(parts[1]),
            id=_to_int(parts[2]),
        )


@dataclass
class MovieData:
    """A movie document in the movies collection."""

    title: str
    year: Optional[int] = None
    fullplot: Optional[str] = None
    genres: List[str] = field(default_factory=list)
    runtime: Optional[int] = None
    released: Optional[datetime] = None
    rated: Optional[str] = None
    imdb: ImdbInfo = field(default_factory=ImdbInfo)
    poster: Optional[str] = None
    lastupdated: datetime = field(default_factory=datetime.now)

    def to_document(self) -> dict:
        """Convert to a document for insertion."""
        return {
            "title": self.title,
            "year": self.year,
            "fullplot": self.fullplot,
            "genres": list(self.genres),
            "runtime": self.runtime,
            "released": self.released,
            "rated": self.rated,
            "imdb": self.imdb.to_dict(),
            "poster": self.poster,
            "lastupdated": self.lastupdated,
            "type": "movie",
        }

    def display_summary(self) -> str:
        """Return formatted string for terminal display."""
        lines = ["=" * 60, f"TITLE: {self.title}"]
        lines.append(f"YEAR: {self.year or 'Unknown'}")
        if self.released:
            lines.append(f"RELEASED: {self.released.date()}")
        if self.rated:
            lines.append(f"RATED: {self.rated}")
        lines.append("-" * 60)
        if self.fullplot:
            plot = self.fullplot[:300] + "..." if len(self.fullplot) > 300 else self.fullplot
            lines.append(f"PLOT: {plot}")
            lines.append("-" * 60)
        if self.genres:
            lines.append(f"GENRES: {', '.join(self.genres)}")
        if self.runtime:
            lines.append(f"RUNTIME: {self.runtime} min")
        if self.imdb.rating is not None:
            lines.append(f"IMDB: {self.imdb.rating}/10 ({self.imdb.votes or 0} votes)")
        lines.append("=" * 60)
        return "\n".join(lines)

    @classmethod
    def from_form(cls, data: dict) -> "MovieData":
        """
        Create MovieData from a submitted movie form.

        Raises:
            ValueError: If numeric fields or the release date are malformed.
        """
        released = data.get("released")
        return cls(
            title=data["title"],
            year=_to_int(data.get("year")),
            fullplot=data.get("fullplot"),
            genres=_to_genres(data.get("genres")),
            runtime=_to_int(data.get("runtime")),
            released=parse_released(released) if released else None,
            rated=data.get("rated"),
            imdb=ImdbInfo.parse(data.get("imdb")),
            poster=data.get("poster"),
        )

    @classmethod
    def from_document(cls, doc: dict) -> "MovieData":
        """Create MovieData from a stored movie or movie request document."""
        return cls(
            title=doc.get("title", "Unknown"),
            year=doc.get("year"),
            fullplot=doc.get("fullplot"),
            genres=list(doc.get("genres") or []),
            runtime=doc.get("runtime"),
            released=doc.get("released"),
            rated=doc.get("rated"),
            imdb=ImdbInfo.parse(doc.get("imdb")),
            poster=doc.get("poster"),
            lastupdated=doc.get("lastupdated") or datetime.now(),
        )


@dataclass
class MovieRequestData:
    """A user's request to have a movie added."""

    movie: MovieData
    user_id: str
    status: RequestStatus = RequestStatus.pending
    active: bool = True

    def to_document(self) -> dict:
        """Convert to a document for insertion. Requests carry no imdb block."""
        doc = self.movie.to_document()
        doc.pop("imdb", None)
        doc.update({
            "user_id": self.user_id,
            "status": self.status.value,
            "active": self.active,
        })
        return doc

    @classmethod
    def from_form(cls, data: dict, user_id: str) -> "MovieRequestData":
        """New requests always start pending and active."""
        return cls(movie=MovieData.from_form(data), user_id=user_id)


@dataclass
class ReviewData:
    """A review document in the reviews collection."""

    movie_id: ObjectId
    user_id: str
    name: str
    text: str
    num_stars: int
    date: datetime = field(default_factory=datetime.now)

    def to_document(self) -> dict:
        """Convert to a document for insertion."""
        return {
            "name": self.name,
            "user_id": self.user_id,
            "date": self.date,
            "text": self.text,
            "num_stars": self.num_stars,
            "movie_id": self.movie_id,
        }


@dataclass
class DuplicateGroup:
    """Movies sharing a plot, a single title and a single year."""

    fullplot: Optional[str]
    title: str
    year: Optional[int]
    movie_ids: List[ObjectId] = field(default_factory=list)

    @property
    def keep_id(self) -> ObjectId:
        """The oldest document in the group survives."""
        return min(self.movie_ids)

    @property
    def delete_ids(self) -> List[ObjectId]:
        keep = self.keep_id
        return sorted(i for i in self.movie_ids if i != keep)

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "year": self.year,
            "keep": str(self.keep_id),
            "delete": [str(i) for i in self.delete_ids],
        }


@dataclass
class DedupeStats:
    """Statistics for duplicate deletion."""

    groups: int = 0
    deleted: int = 0
    failed_groups: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_groups

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "groups": self.groups,
            "deleted": self.deleted,
            "failed_groups": list(self.failed_groups),
            "success": self.success,
        }


@dataclass
class ApprovalStats:
    """Statistics for interactive request review."""

    reviewed: int = 0
    accepted: int = 0
    denied: int = 0
    skipped: int = 0
    remaining_pending: int = 0
    exit_reason: str = "completed"  # "completed", "quit", "interrupted"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "reviewed": self.reviewed,
            "accepted": self.accepted,
            "denied": self.denied,
            "skipped": self.skipped,
            "remaining_pending": self.remaining_pending,
            "exit_reason": self.exit_reason,
        }

    def __str__(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Reviewed: {self.reviewed}",
            f"Accepted: {self.accepted}",
            f"Denied: {self.denied}",
            f"Skipped: {self.skipped}",
            f"Remaining pending: {self.remaining_pending}",
            f"Exit reason: {self.exit_reason}",
        ]
        return "\n".join(lines)


def serialize_document(value: Any) -> Any:
    """Recursively convert ObjectIds and datetimes for JSON output."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize_document(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_document(v) for v in value]
    return value
