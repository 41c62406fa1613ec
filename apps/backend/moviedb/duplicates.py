"""
Duplicate movie detection.

Movies are grouped by their full plot. A group holds duplicates when it
contains more than one movie, all with the same title and the same year.
"""

from typing import Iterable, List

from .models import DuplicateGroup

DUPLICATE_PIPELINE = [
    {
        "$group": {
            "_id": "$fullplot",
            "movieIds": {"$addToSet": "$_id"},
            "titles": {"$addToSet": "$title"},
            "years": {"$addToSet": "$year"},
            "lastupdated": {"$addToSet": "$lastupdated"},
        }
    },
    {"$match": {"movieIds.1": {"$exists": True}}},
]


def is_duplicate_group(group: dict) -> bool:
    """Check a single aggregation result against the duplicate rule."""
    return (
        len(group.get("movieIds", [])) > 1
        and len(group.get("titles", [])) == 1
        and len(group.get("years", [])) == 1
    )


def select_duplicates(groups: Iterable[dict]) -> List[DuplicateGroup]:
    """
    Pick the duplicate groups out of DUPLICATE_PIPELINE results.

    Args:
        groups: Aggregation output, one dict per distinct fullplot

    Returns:
        DuplicateGroup for every group that holds duplicates
    """
    duplicates = []
    for group in groups:
        if not is_duplicate_group(group):
            continue
        duplicates.append(
            DuplicateGroup(
                fullplot=group.get("_id"),
                title=group["titles"][0],
                year=group["years"][0],
                movie_ids=list(group["movieIds"]),
            )
        )
    return duplicates
