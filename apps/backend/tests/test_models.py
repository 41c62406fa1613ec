"""
Model and duplicate detection tests.
"""

import pytest
from datetime import date, datetime

from bson import ObjectId

from moviedb.duplicates import is_duplicate_group, select_duplicates
from moviedb.models import (
    ApprovalStats,
    DedupeStats,
    DuplicateGroup,
    ImdbInfo,
    MovieData,
    MovieRequestData,
    RequestStatus,
    ReviewData,
    parse_released,
    serialize_document,
)

from conftest import SAMPLE_REQUEST_FORM


class TestParseReleased:
    """Release dates arrive as 'YYYY-MM-DD' strings from forms."""

    def test_plain_date(self):
        assert parse_released("2016-11-11") == datetime(2016, 11, 11)

    def test_time_part_ignored(self):
        assert parse_released("2016-11-11T00:00:00.000Z") == datetime(2016, 11, 11)

    def test_date_object(self):
        assert parse_released(date(1999, 10, 15)) == datetime(1999, 10, 15)

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            parse_released("next friday")

    def test_impossible_date_rejected(self):
        with pytest.raises(ValueError):
            parse_released("2016-13-40")


class TestImdbInfo:
    """IMDb info is submitted as 'rating,votes,id'."""

    def test_parse_full(self):
        info = ImdbInfo.parse("7.9,1200,2543164")
        assert info.rating == 7.9
        assert info.votes == 1200
        assert info.id == 2543164

    def test_parse_partial(self):
        info = ImdbInfo.parse("6.5")
        assert info.rating == 6.5
        assert info.votes is None
        assert info.id is None

    def test_parse_list(self):
        info = ImdbInfo.parse(["8.1", "300", "42"])
        assert info.to_dict() == {"rating": 8.1, "votes": 300, "id": 42}

    def test_parse_none(self):
        assert ImdbInfo.parse(None).to_dict() == {"rating": None, "votes": None, "id": None}

    def test_parse_bad_number(self):
        with pytest.raises(ValueError):
            ImdbInfo.parse("great,many,tt1")


class TestMovieData:
    """Form input is normalized before storage."""

    def test_from_form_converts_types(self):
        movie = MovieData.from_form({**SAMPLE_REQUEST_FORM, "imdb": "7.9,1200,2543164"})

        assert movie.year == 2016
        assert movie.runtime == 116
        assert movie.released == datetime(2016, 11, 11)
        assert movie.genres == ["Drama", "Sci-Fi"]
        assert movie.imdb.rating == 7.9

    def test_from_form_comma_separated_genres(self):
        movie = MovieData.from_form({**SAMPLE_REQUEST_FORM, "genres": "Drama, Sci-Fi"})
        assert movie.genres == ["Drama", "Sci-Fi"]

    def test_from_form_bad_year(self):
        with pytest.raises(ValueError):
            MovieData.from_form({**SAMPLE_REQUEST_FORM, "year": "twenty sixteen"})

    def test_to_document(self):
        doc = MovieData.from_form(SAMPLE_REQUEST_FORM).to_document()

        assert doc["type"] == "movie"
        assert doc["title"] == "Arrival"
        assert isinstance(doc["lastupdated"], datetime)
        assert doc["imdb"] == {"rating": None, "votes": None, "id": None}

    def test_from_document_round_trip_fields(self):
        doc = MovieData.from_form(SAMPLE_REQUEST_FORM).to_document()
        movie = MovieData.from_document(doc)
        assert movie.title == "Arrival"
        assert movie.year == 2016

    def test_display_summary(self):
        summary = MovieData.from_form(SAMPLE_REQUEST_FORM).display_summary()
        assert "TITLE: Arrival" in summary
        assert "RELEASED: 2016-11-11" in summary


class TestMovieRequestData:
    """New requests are always pending and active."""

    def test_new_request_defaults(self):
        doc = MovieRequestData.from_form(SAMPLE_REQUEST_FORM, "alice@example.com").to_document()

        assert doc["status"] == "pending"
        assert doc["active"] is True
        assert doc["user_id"] == "alice@example.com"
        assert "imdb" not in doc

    def test_client_status_ignored(self):
        form = {**SAMPLE_REQUEST_FORM, "status": "accepted", "active": False}
        doc = MovieRequestData.from_form(form, "alice@example.com").to_document()

        assert doc["status"] == RequestStatus.pending.value
        assert doc["active"] is True


class TestReviewData:

    def test_to_document(self):
        movie_id = ObjectId()
        review = ReviewData(movie_id=movie_id, user_id="a@b.c", name="a", text="Great", num_stars=5)
        doc = review.to_document()
        assert doc["movie_id"] == movie_id
        assert doc["num_stars"] == 5


class TestStats:

    def test_dedupe_success_depends_on_failures(self):
        stats = DedupeStats(groups=2, deleted=3)
        assert stats.success
        stats.failed_groups.append("Inception")
        assert not stats.to_dict()["success"]

    def test_approval_stats_str(self):
        text = str(ApprovalStats(reviewed=2, accepted=1, denied=1))
        assert "Accepted: 1" in text
        assert "Exit reason: completed" in text


class TestSerializeDocument:

    def test_nested_values(self):
        oid = ObjectId()
        doc = {
            "_id": oid,
            "released": datetime(2016, 11, 11),
            "reviews": [{"_id": oid, "date": datetime(2024, 1, 1, 12, 0)}],
            "year": 2016,
        }
        result = serialize_document(doc)

        assert result["_id"] == str(oid)
        assert result["released"] == "2016-11-11T00:00:00"
        assert result["reviews"][0]["_id"] == str(oid)
        assert result["year"] == 2016


class TestDuplicateDetection:
    """Duplicates share a plot, one title and one year."""

    def test_group_with_one_title_and_year(self):
        group = {"movieIds": [ObjectId(), ObjectId()], "titles": ["Heat"], "years": [1995]}
        assert is_duplicate_group(group)

    def test_group_with_two_titles(self):
        group = {"movieIds": [ObjectId(), ObjectId()], "titles": ["Heat", "Heat 2"], "years": [1995]}
        assert not is_duplicate_group(group)

    def test_group_with_two_years(self):
        group = {"movieIds": [ObjectId(), ObjectId()], "titles": ["Heat"], "years": [1986, 1995]}
        assert not is_duplicate_group(group)

    def test_single_movie_is_not_a_duplicate(self):
        group = {"movieIds": [ObjectId()], "titles": ["Heat"], "years": [1995]}
        assert not is_duplicate_group(group)

    def test_select_keeps_oldest(self):
        ids = [ObjectId() for _ in range(3)]
        groups = [
            {"_id": "A plot.", "movieIds": list(reversed(ids)), "titles": ["Heat"], "years": [1995]},
            {"_id": "Other plot.", "movieIds": [ObjectId(), ObjectId()], "titles": ["X", "Y"], "years": [2000]},
        ]
        selected = select_duplicates(groups)

        assert len(selected) == 1
        assert selected[0].keep_id == ids[0]
        assert selected[0].delete_ids == ids[1:]
        assert selected[0].to_dict()["keep"] == str(ids[0])

    def test_duplicate_group_delete_ids_exclude_keep(self):
        ids = [ObjectId(), ObjectId()]
        group = DuplicateGroup(fullplot="p", title="t", year=2000, movie_ids=ids)
        assert group.keep_id not in group.delete_ids
