"""Tests for rating upserts and rating aggregation."""

import pytest
from sqlalchemy.orm import Session

from reelrating.metadata import Movie, MovieRatingCategory, Rating
from reelrating.movies import MovieLookup
from reelrating.outcomes import (
    REASON_MOVIE_NOT_FOUND,
    REASON_NOT_AN_INTEGER,
    REASON_VALUE_OUT_OF_RANGE,
    WriteStatus,
)
from reelrating.ratings import RatingAggregator


def _rate(aggregator: RatingAggregator, movie_id: str, username: str, name: str, value, upperbound, subtype="scale"):
    return aggregator.create_or_update_rating(name, value, upperbound, subtype, username, movie_id, "public")


class TestCreateOrUpdateRating:
    """Upsert and validation behaviour."""

    def test_first_submission_creates_row(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)

        result = _rate(aggregator, movie.id, "alice", "Stickiness", 7, 10)

        assert result.status == WriteStatus.CREATED
        row = test_db.query(Rating).one()
        assert row.value == 7
        assert row.upperbound == 10
        assert row.movie_title == "Blade Runner"
        assert row.subtype == "scale"
        assert row.privacy == "public"

    def test_resubmission_overwrites_value_only(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "alice", "Stickiness", 3, 10, subtype="scale")

        result = aggregator.create_or_update_rating(
            "Stickiness", 9, 10, "thumbsup", "alice", movie.id, "private"
        )

        assert result.status == WriteStatus.UPDATED
        rows = test_db.query(Rating).all()
        assert len(rows) == 1
        assert rows[0].value == 9
        assert rows[0].subtype == "scale"
        assert rows[0].privacy == "public"

    def test_same_value_resubmission_is_unchanged(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "alice", "Stickiness", 4, 5)

        result = _rate(aggregator, movie.id, "alice", "Stickiness", 4, 5)

        assert result.status == WriteStatus.UNCHANGED
        assert test_db.query(Rating).count() == 1

    @pytest.mark.parametrize("upperbound", [1, 5, 10])
    def test_out_of_range_values_are_dropped(self, test_db: Session, movie: Movie, upperbound):
        aggregator = RatingAggregator(test_db)

        low = _rate(aggregator, movie.id, "alice", "Stickiness", 0, upperbound)
        high = _rate(aggregator, movie.id, "alice", "Stickiness", upperbound + 1, upperbound)

        assert low.status == WriteStatus.REJECTED
        assert low.reason == REASON_VALUE_OUT_OF_RANGE
        assert high.reason == REASON_VALUE_OUT_OF_RANGE
        assert test_db.query(Rating).count() == 0

    def test_out_of_range_does_not_touch_existing_row(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "alice", "Stickiness", 3, 5)

        _rate(aggregator, movie.id, "alice", "Stickiness", 6, 5)

        assert test_db.query(Rating).one().value == 3

    def test_non_integer_value_is_dropped(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)

        result = _rate(aggregator, movie.id, "alice", "Stickiness", "lots", 5)

        assert result.reason == REASON_NOT_AN_INTEGER
        assert test_db.query(Rating).count() == 0

    def test_numeric_strings_are_accepted(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)

        result = _rate(aggregator, movie.id, "alice", "Stickiness", "4", "5")

        assert result.status == WriteStatus.CREATED
        assert test_db.query(Rating).one().value == 4

    def test_unknown_movie_is_a_silent_noop(self, test_db: Session, movie: Movie):
        # Callers get no error for an unknown movie; only the result says so.
        aggregator = RatingAggregator(test_db)

        result = _rate(aggregator, "does-not-exist", "alice", "Stickiness", 3, 5)

        assert result.status == WriteStatus.REJECTED
        assert result.reason == REASON_MOVIE_NOT_FOUND
        assert test_db.query(Rating).count() == 0

    def test_category_name_registered_once(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "alice", "Stickiness", 3, 5)
        _rate(aggregator, movie.id, "bob", "Stickiness", 4, 5)
        _rate(aggregator, movie.id, "bob", "Stickiness", 8, 10)
        _rate(aggregator, movie.id, "carol", "How Harrison Ford is it", 2, 3)

        names = MovieLookup(test_db).get_rating_category_names(movie.id)

        assert names == ["Stickiness", "How Harrison Ford is it"]
        assert test_db.query(MovieRatingCategory).count() == 2

    def test_rating_usernames_are_case_sensitive(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "Alice", "Stickiness", 3, 5)
        _rate(aggregator, movie.id, "alice", "Stickiness", 4, 5)

        assert test_db.query(Rating).count() == 2


class TestMostPopularAggregate:
    """Two-stage mode selection."""

    def test_selects_most_common_name_then_upperbound(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        for username, value in [("u1", 1), ("u2", 2), ("u3", 4)]:
            _rate(aggregator, movie.id, username, "A", value, 5)
        _rate(aggregator, movie.id, "u4", "A", 10, 10)
        _rate(aggregator, movie.id, "u5", "B", 5, 5)
        _rate(aggregator, movie.id, "u6", "B", 5, 5)

        aggregate = aggregator.get_most_popular_aggregated_rating_for_movie(movie.id)

        assert aggregate.category_name == "A"
        assert aggregate.upperbound == 5
        assert aggregate.count == 3
        assert aggregate.average_value == pytest.approx(7 / 3)

    def test_name_ties_go_to_smallest_name(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "u1", "Zest", 5, 5)
        _rate(aggregator, movie.id, "u2", "Zest", 5, 5)
        _rate(aggregator, movie.id, "u3", "Acting", 1, 5)
        _rate(aggregator, movie.id, "u4", "Acting", 2, 5)

        aggregate = aggregator.get_most_popular_aggregated_rating_for_movie(movie.id)

        assert aggregate.category_name == "Acting"
        assert aggregate.average_value == pytest.approx(1.5)

    def test_mixed_case_name_ties_use_codepoint_order(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "u1", "apple", 1, 5)
        _rate(aggregator, movie.id, "u2", "apple", 1, 5)
        _rate(aggregator, movie.id, "u3", "Banana", 4, 5)
        _rate(aggregator, movie.id, "u4", "Banana", 5, 5)

        aggregate = aggregator.get_most_popular_aggregated_rating_for_movie(movie.id)

        assert aggregate.category_name == "Banana"
        assert aggregate.average_value == pytest.approx(4.5)
        categories = aggregator.get_unique_rating_categories_and_user_rating_with_movie_id(movie.id, "u1")
        assert categories[0].category_name == aggregate.category_name

    def test_single_rating_aggregate(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "u1", "Pacing", 2, 3)

        aggregate = aggregator.get_most_popular_aggregated_rating_for_movie(movie.id)

        assert (aggregate.category_name, aggregate.upperbound, aggregate.count) == ("Pacing", 3, 1)
        assert aggregate.average_value == pytest.approx(2.0)

    def test_upperbound_ties_go_to_smallest_upperbound(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "u1", "A", 9, 10)
        _rate(aggregator, movie.id, "u2", "A", 3, 3)

        aggregate = aggregator.get_most_popular_aggregated_rating_for_movie(movie.id)

        assert aggregate.upperbound == 3
        assert aggregate.average_value == pytest.approx(3.0)

    def test_ignores_other_movies(self, test_db: Session, movie: Movie, other_movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "u1", "A", 2, 5)
        _rate(aggregator, other_movie.id, "u1", "B", 5, 5)
        _rate(aggregator, other_movie.id, "u2", "B", 5, 5)

        aggregate = aggregator.get_most_popular_aggregated_rating_for_movie(movie.id)

        assert aggregate.category_name == "A"
        assert aggregate.count == 1

    def test_movie_without_ratings_returns_none(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)

        assert aggregator.get_most_popular_aggregated_rating_for_movie(movie.id) is None
        assert aggregator.get_most_popular_aggregated_rating_for_movie("unknown") is None


class TestCategoryAverages:
    """Per-category averages with the requester's own rating merged in."""

    def test_personalization_merge(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "alice", "Acting", 4, 5)
        _rate(aggregator, movie.id, "bob", "Acting", 2, 5)
        _rate(aggregator, movie.id, "bob", "Soundtrack", 6, 10)
        _rate(aggregator, movie.id, "carol", "Soundtrack", 9, 10)

        categories = aggregator.get_unique_rating_categories_and_user_rating_with_movie_id(movie.id, "alice")

        assert [(c.category_name, c.upperbound) for c in categories] == [("Acting", 5), ("Soundtrack", 10)]
        acting, soundtrack = categories
        assert acting.average_value == pytest.approx(3.0)
        assert acting.user_value == 4
        assert acting.username == "alice"
        assert acting.count == 2
        assert soundtrack.average_value == pytest.approx(7.5)
        assert soundtrack.user_value is None
        assert soundtrack.username is None

    def test_same_name_different_upperbound_are_distinct(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "alice", "Acting", 5, 5)
        _rate(aggregator, movie.id, "alice", "Acting", 2, 10)

        categories = aggregator.get_unique_rating_categories_and_user_rating_with_movie_id(movie.id, "alice")

        assert [(c.category_name, c.upperbound, c.user_value) for c in categories] == [
            ("Acting", 5, 5),
            ("Acting", 10, 2),
        ]

    def test_subtype_comes_from_group(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "alice", "Would watch again", 1, 2, subtype="yes-no")

        categories = aggregator.get_unique_rating_categories_and_user_rating_with_movie_id(movie.id, "bob")

        assert categories[0].subtype == "yes-no"

    def test_order_is_stable_across_calls(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)
        for name in ["Zest", "Acting", "Music"]:
            _rate(aggregator, movie.id, "alice", name, 1, 5)

        first = aggregator.get_unique_rating_categories_and_user_rating_with_movie_id(movie.id, "alice")
        second = aggregator.get_unique_rating_categories_and_user_rating_with_movie_id(movie.id, "alice")

        assert [c.category_name for c in first] == ["Acting", "Music", "Zest"]
        assert first == second

    def test_movie_without_ratings_returns_empty_list(self, test_db: Session, movie: Movie):
        aggregator = RatingAggregator(test_db)

        assert aggregator.get_unique_rating_categories_and_user_rating_with_movie_id(movie.id, "alice") == []


class TestRatingProjections:
    """Filtered rating queries."""

    @pytest.fixture
    def seeded(self, test_db: Session, movie: Movie, other_movie: Movie):
        aggregator = RatingAggregator(test_db)
        _rate(aggregator, movie.id, "alice", "Acting", 4, 5)
        _rate(aggregator, movie.id, "bob", "Acting", 7, 10)
        _rate(aggregator, other_movie.id, "alice", "Acting", 1, 5)
        _rate(aggregator, other_movie.id, "bob", "Music", 3, 5)
        return aggregator

    def test_by_name_and_upperbound(self, seeded: RatingAggregator):
        rows = seeded.get_ratings_with_same_name_and_upperbound("Acting", 5)
        assert sorted((r.username, r.value) for r in rows) == [("alice", 1), ("alice", 4)]

    def test_by_name(self, seeded: RatingAggregator):
        assert len(seeded.get_ratings_with_same_name("Acting")) == 3

    def test_by_movie(self, seeded: RatingAggregator, movie: Movie):
        rows = seeded.get_ratings_with_movie_id(movie.id)
        assert [r.username for r in rows] == ["alice", "bob"]

    def test_by_upperbound(self, seeded: RatingAggregator):
        assert len(seeded.get_ratings_with_upperbound(5)) == 3
        assert len(seeded.get_ratings_with_upperbound("10")) == 1
        assert seeded.get_ratings_with_upperbound("ten") == []
