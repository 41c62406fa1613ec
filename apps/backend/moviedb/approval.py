"""
Approval workflow for movie requests.

A request starts pending and moves once, either to denied or to accepted.
The active flag is separate: deactivating hides a request from its owner's
profile without touching its status.

Also provides the interactive review used by the admin CLI:
- Show each pending request, accept/deny/skip it
- Safe exit: Ctrl+C or 'q' to exit, decisions already made are kept
"""

from enum import Enum
from typing import List, Optional, Tuple

from bson import ObjectId

from .database import DatabaseManager, IdLike
from .models import ApprovalStats, MovieData, RequestStatus
from .utils import format_count, setup_logger


class TransitionResult(str, Enum):
    """Outcome of a request lifecycle operation."""

    ok = "ok"
    not_found = "not_found"
    not_owner = "not_owner"
    invalid_state = "invalid_state"
    movie_not_found = "movie_not_found"


class ApprovalManager:
    """
    Applies lifecycle operations to movie requests.

    Each update is guarded in its filter (owner, and pending status for
    deny/accept); on a miss the request is re-read to explain why.
    """

    def __init__(self, db: DatabaseManager, log_dir=None):
        self.db = db
        self.logger = setup_logger("approval", log_dir)

    def _explain_miss(self, request_id: IdLike, user_id: str) -> TransitionResult:
        request = self.db.get_request(request_id)
        if request is None:
            return TransitionResult.not_found
        if request.get("user_id") != user_id:
            return TransitionResult.not_owner
        return TransitionResult.invalid_state

    def deny(self, request_id: IdLike, user_id: str) -> TransitionResult:
        """Deny a pending request. The active flag is left as is."""
        if self.db.deny_request(request_id, user_id):
            self.logger.info(f"Denied request {request_id} from {user_id}")
            return TransitionResult.ok
        return self._explain_miss(request_id, user_id)

    def accept(self, request_id: IdLike, user_id: str, movie_id: IdLike) -> TransitionResult:
        """Accept a pending request and link the movie that was added for it."""
        if self.db.accept_request(request_id, user_id, movie_id):
            self.logger.info(f"Accepted request {request_id} from {user_id} as movie {movie_id}")
            return TransitionResult.ok
        return self._explain_miss(request_id, user_id)

    def accept_with_lookup(
        self,
        request_id: IdLike,
        user_id: str,
        title: str,
        year: Optional[int] = None,
        genres: Optional[List[str]] = None,
        rated: Optional[str] = None,
    ) -> Tuple[TransitionResult, Optional[ObjectId]]:
        """
        Accept a request for a movie an admin has already added.

        The movie is located by title, year, rating and first genre.

        Returns:
            (result, movie_id) where movie_id is None unless a movie was found
        """
        genre = genres[0] if genres else None
        movie = self.db.find_movie(title, year=year, rated=rated, genre=genre)
        if movie is None:
            self.logger.warning(f"Accept of {request_id} failed: no movie '{title}' ({year})")
            return TransitionResult.movie_not_found, None
        return self.accept(request_id, user_id, movie["_id"]), movie["_id"]

    def deactivate(self, request_id: IdLike, user_id: str) -> TransitionResult:
        """Hide a request from its owner's profile. Works in any status."""
        if self.db.deactivate_request(request_id, user_id):
            self.logger.info(f"Deactivated request {request_id} from {user_id}")
            return TransitionResult.ok
        return self._explain_miss(request_id, user_id)

    def delete(self, request_id: IdLike, user_id: str) -> TransitionResult:
        """Delete a request. Only its owner may do so."""
        if self.db.delete_request(request_id, user_id):
            self.logger.info(f"Deleted request {request_id} from {user_id}")
            return TransitionResult.ok
        return self._explain_miss(request_id, user_id)

    def publish(self, request_id: IdLike) -> Tuple[TransitionResult, Optional[ObjectId]]:
        """
        Add the requested movie to the catalogue and accept the request.

        Returns:
            (result, movie_id) where movie_id is set only when the request was accepted
        """
        request = self.db.get_request(request_id)
        if request is None:
            return TransitionResult.not_found, None
        if request.get("status") != RequestStatus.pending.value:
            return TransitionResult.invalid_state, None

        movie = MovieData.from_document(request)
        movie_id = self.db.add_movie(movie.to_document())
        result = self.accept(request_id, request["user_id"], movie_id)
        if result is not TransitionResult.ok:
            # The request moved on meanwhile; the new movie has no request behind it
            self.db.delete_movie(movie_id)
            self.logger.warning(f"Publish of {request_id} failed ({result.value}), removed movie {movie_id}")
            return result, None
        return result, movie_id

    # ============ INTERACTIVE REVIEW ============

    def prompt_decision(self) -> str:
        """
        Prompt the admin for a decision.

        Returns:
            'a' - accept (add movie and accept request)
            'd' - deny
            's' - skip (keep pending)
            'q' - quit
        """
        print("\nOptions:")
        print("  [A] Accept (add movie to catalogue)")
        print("  [D] Deny")
        print("  [S] Skip (keep pending for later)")
        print("  [Q] Quit")
        print()

        while True:
            try:
                response = input("Your choice [A/D/S/Q]: ").strip().lower()
                if response in ("a", "d", "s", "q", ""):
                    return response if response else "s"
            except EOFError:
                return "q"
            print("Invalid input. Please enter A, D, S, or Q.")

    def review_interactive(self, limit: Optional[int] = None) -> ApprovalStats:
        """
        Interactive review of pending requests, oldest first.

        Args:
            limit: Max number of requests to review in this session
        """
        stats = ApprovalStats()
        pending = self.db.get_all_requests(status=RequestStatus.pending.value, limit=limit or 0)

        if not pending:
            print("\nNo pending movie requests!")
            return stats

        print(f"\n{format_count(len(pending))} requests to review...")
        print("(Press Ctrl+C at any time to safely exit)\n")

        try:
            for i, request in enumerate(pending, 1):
                print(f"\n[{i}/{len(pending)}] requested by {request.get('user_id')}")
                print(MovieData.from_document(request).display_summary())

                decision = self.prompt_decision()

                if decision == "q":
                    stats.exit_reason = "quit"
                    break

                stats.reviewed += 1
                title = request.get("title")

                if decision == "a":
                    result, _ = self.publish(request["_id"])
                    if result is TransitionResult.ok:
                        print(f"Accepted: {title}")
                        stats.accepted += 1
                    else:
                        print(f"Could not accept {title}: {result.value}")
                elif decision == "d":
                    result = self.deny(request["_id"], request["user_id"])
                    if result is TransitionResult.ok:
                        print(f"Denied: {title}")
                        stats.denied += 1
                    else:
                        print(f"Could not deny {title}: {result.value}")
                else:
                    stats.skipped += 1

        except KeyboardInterrupt:
            print("\n\nInterrupted. Decisions made so far are saved.")
            stats.exit_reason = "interrupted"

        stats.remaining_pending = len(self.db.get_all_requests(status=RequestStatus.pending.value))
        return stats
