"""Inspection commands (movie summary and tag scores)."""

import sys
from typing import Optional

import click

from reelrating.cli.base import CliCommand
from reelrating.movies import MovieLookup
from reelrating.ratings import RatingAggregator
from reelrating.tags import TagVotingEngine


@click.command(name='movie-summary')
@click.argument('movie_id')
@click.option('--username', default=None, help='Show this user\'s own ratings alongside the averages')
def movie_summary_command(movie_id: str, username: Optional[str]):
    """Show the aggregated ratings of a movie."""
    cmd = MovieSummaryCommand(movie_id, username)
    cmd.run()


@click.command(name='tag-scores')
@click.argument('movie_id')
@click.option('--username', default='', help='Show this user\'s vote on each tag')
def tag_scores_command(movie_id: str, username: str):
    """Show tag scores of a movie, highest first."""
    cmd = TagScoresCommand(movie_id, username)
    cmd.run()


class MovieSummaryCommand(CliCommand):
    """Command to print rating aggregates for one movie."""

    def __init__(self, movie_id: str, username: Optional[str]):
        super().__init__()
        self.movie_id = movie_id
        self.username = username

    def run(self):
        """Execute movie summary command."""
        self.setup_db()
        try:
            self._movie_summary()
        finally:
            self.cleanup_db()

    def _movie_summary(self):
        movies = MovieLookup(self.db)
        movie = movies.resolve_movie(self.movie_id)
        if not movie.exists:
            click.echo(f"Error: Movie {self.movie_id} not found", err=True)
            sys.exit(1)

        aggregator = RatingAggregator(self.db, movies)
        click.echo(f"\nRatings for {movie.title} ({self.movie_id}):")
        click.echo("-" * 80)

        top = aggregator.get_most_popular_aggregated_rating_for_movie(self.movie_id)
        if top is None:
            click.echo("No ratings yet.")
            return
        click.echo(
            f"Most popular: {top.category_name} (1-{top.upperbound}) "
            f"avg {top.average_value:.2f} over {top.count} ratings"
        )
        click.echo()

        categories = aggregator.get_unique_rating_categories_and_user_rating_with_movie_id(
            self.movie_id, self.username
        )
        for category in categories:
            own = f"  [yours: {category.user_value}]" if category.user_value is not None else ""
            click.echo(
                f"  • {category.category_name} (1-{category.upperbound}): "
                f"{category.average_value:.2f} from {category.count}{own}"
            )


class TagScoresCommand(CliCommand):
    """Command to print tag scores for one movie."""

    def __init__(self, movie_id: str, username: str):
        super().__init__()
        self.movie_id = movie_id
        self.username = username

    def run(self):
        """Execute tag scores command."""
        self.setup_db()
        try:
            scores = TagVotingEngine(self.db).get_tag_scores_for_movie_modal(self.username, self.movie_id)
            if not scores:
                click.echo(f"No tags for movie {self.movie_id}")
                return
            for score in scores:
                click.echo(f"{score.score:>5}  {score.tag_name}  ({score.state.value})")
        finally:
            self.cleanup_db()
