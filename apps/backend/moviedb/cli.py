"""
Command-line interface for MovieDB administration.

Provides commands for:
- setup: Create the indexes the API relies on
- status: Show collection counts
- test: Test database and identity provider connections
- import: Seed movies from a JSON file
- dedupe: Find and delete duplicate movies
- list-requests: List movie requests
- review: Interactive review of pending movie requests
- serve: Run the API server
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from .approval import ApprovalManager
from .config import Config
from .database import DatabaseManager
from .identity import IdentityClient, IdentityProviderError
from .models import MovieData
from .utils import ask_yes_no, banner, clip, format_count, import_progress, print_table


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all commands."""
    parser = argparse.ArgumentParser(
        prog="moviedb",
        description="MovieDB admin tools - manage movies and movie requests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create indexes (run first)
  python -m moviedb setup

  # Seed movies
  python -m moviedb import movies.json

  # Preview duplicate cleanup
  python -m moviedb dedupe --dry-run

  # Review pending requests
  python -m moviedb review --limit 10

  # Run the API
  python -m moviedb serve
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("setup", help="Create required indexes")
    subparsers.add_parser("status", help="Show current database status")
    subparsers.add_parser("test", help="Test database and identity provider connections")

    import_parser = subparsers.add_parser("import", help="Import movies from a JSON array")
    import_parser.add_argument("file", type=Path, help="JSON file containing a list of movies")
    import_parser.add_argument(
        "--test-limit",
        type=int,
        help="Limit number of movies to import (for testing)",
    )

    dedupe_parser = subparsers.add_parser("dedupe", help="Delete duplicate movies")
    dedupe_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only list duplicate groups",
    )
    dedupe_parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip confirmation prompt",
    )

    list_parser = subparsers.add_parser("list-requests", help="List movie requests")
    list_parser.add_argument(
        "--status",
        choices=["pending", "denied", "accepted"],
        help="Only show requests with this status",
    )
    list_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Number of requests to show (default: 20)",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (default: API_PORT)",
    )

    review_parser = subparsers.add_parser("review", help="Interactive review of pending requests")
    review_parser.add_argument(
        "--limit",
        type=int,
        help="Limit number of requests to review",
    )

    return parser


def cmd_setup(db: DatabaseManager) -> int:
    """Run setup command."""
    banner("MovieDB Setup")

    result = db.ensure_indexes()
    for label in result["created"]:
        print(f"  {label:<28} OK")
    for label in result["failed"]:
        print(f"  {label:<28} FAILED")

    if result["failed"]:
        print("\nWARNING: Some indexes could not be created (see logs).")
        return 1
    print("\nAll indexes present.")
    return 0


def cmd_status(db: DatabaseManager) -> int:
    """Run status command."""
    banner("MovieDB Status")

    status = db.get_status()
    print_table(
        {
            "Movies": format_count(status["movies"]),
            "Reviews": format_count(status["reviews"]),
            "Movie requests": format_count(status["movie_requests"]),
            "Pending requests": format_count(status["pending_requests"]),
        },
        title="Database Status",
    )
    return 0


def cmd_test(db: DatabaseManager, identity: IdentityClient) -> int:
    """Run connection tests."""
    banner("Connection Test")
    ok = True

    try:
        db.ping()
        print("  Database:           OK")
    except Exception as e:
        print(f"  Database:           FAILED ({e})")
        ok = False

    try:
        identity.get_token()
        print("  Identity provider:  OK")
    except IdentityProviderError as e:
        print(f"  Identity provider:  FAILED ({e.message})")
        ok = False

    return 0 if ok else 1


def cmd_import(db: DatabaseManager, args) -> int:
    """Import movies from a JSON file."""
    banner("Import Movies")

    with open(args.file, encoding="utf-8") as f:
        items = json.load(f)

    if not isinstance(items, list):
        print("ERROR: file must contain a JSON array of movies")
        return 1

    if args.test_limit:
        print(f"TEST MODE: Limited to {args.test_limit} movies\n")
        items = items[: args.test_limit]

    inserted = 0
    errors = 0
    for item in import_progress(items):
        try:
            movie = MovieData.from_form(item)
        except (KeyError, ValueError) as e:
            db.logger.warning(f"Skipping malformed movie {item.get('title')!r}: {e}")
            errors += 1
            continue
        db.add_movie(movie.to_document())
        inserted += 1

    print_table(
        {"Processed": len(items), "Inserted": inserted, "Errors": errors},
        title="Results",
    )
    return 0 if errors == 0 else 1


def cmd_dedupe(db: DatabaseManager, args) -> int:
    """Find and delete duplicate movies."""
    banner("Duplicate Movies")

    groups = db.get_duplicate_groups()
    if not groups:
        print("No duplicates to delete")
        return 0

    for group in groups:
        print(f"  {clip(group.title, 40):<42} ({group.year}) "
              f"x{len(group.movie_ids)}")

    total = sum(len(g.delete_ids) for g in groups)
    print(f"\n{format_count(len(groups))} groups, {format_count(total)} movies to delete")

    if args.dry_run:
        return 0
    if not args.yes and not ask_yes_no("Delete these duplicates?"):
        print("Cancelled.")
        return 0

    stats = db.delete_duplicates(groups)
    print_table(stats.to_dict(), title="Results")
    return 0 if stats.success else 1


def cmd_list_requests(db: DatabaseManager, args) -> int:
    """List movie requests."""
    banner("Movie Requests")

    requests_list = db.get_all_requests(status=args.status, limit=args.limit)
    if not requests_list:
        print("No movie requests.")
        return 0

    for request in requests_list:
        active = "" if request.get("active", True) else " [inactive]"
        print(
            f"  {str(request['_id'])}  {request.get('status', '?'):<9} "
            f"{clip(request.get('title'), 35):<36} "
            f"{request.get('user_id')}{active}"
        )
    return 0


def cmd_review(approval: ApprovalManager, args) -> int:
    """Run interactive request review."""
    banner("Review Movie Requests")

    stats = approval.review_interactive(limit=args.limit)
    print()
    print(stats)
    return 0


def cmd_serve(config: Config, args) -> int:
    """Run the API server with uvicorn."""
    import uvicorn

    port = args.port or config.api_port
    banner("MovieDB API")
    print(f"Listening on http://{config.api_host}:{port} (docs at /api/docs)")
    uvicorn.run("api.main:app", host=config.api_host, port=port, reload=config.api_debug)
    return 0


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 0

    try:
        config = Config.from_env()
    except ValueError as e:
        print(f"Configuration error: {e}")
        print("\nMake sure your .env file contains:")
        print("  MOVIEREVIEWS_DB_URI=<mongodb connection string>")
        print("  MOVIEREVIEWS_NS=<database name>")
        print("  AUTH0_BASE, CLIENT_ID, CLIENT (for identity provider commands)")
        return 1

    if parsed_args.command == "serve":
        return cmd_serve(config, parsed_args)

    try:
        db = DatabaseManager(config)
    except Exception as e:
        print(f"Error initializing database: {e}")
        return 1

    try:
        if parsed_args.command == "setup":
            return cmd_setup(db)
        elif parsed_args.command == "status":
            return cmd_status(db)
        elif parsed_args.command == "test":
            return cmd_test(db, IdentityClient(config))
        elif parsed_args.command == "import":
            return cmd_import(db, parsed_args)
        elif parsed_args.command == "dedupe":
            return cmd_dedupe(db, parsed_args)
        elif parsed_args.command == "list-requests":
            return cmd_list_requests(db, parsed_args)
        elif parsed_args.command == "review":
            return cmd_review(ApprovalManager(db, config.log_dir), parsed_args)
        else:
            parser.print_help()
            return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled.")
        return 130
    except Exception as e:
        print(f"\nError: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
