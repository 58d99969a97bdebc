"""ReelRating command line interface."""

import click

from reelrating.cli.base import configure_logging
from reelrating.cli.commands import database, inspect


@click.group()
def cli():
    """ReelRating administration commands."""
    configure_logging()


cli.add_command(database.init_db_command)
cli.add_command(inspect.movie_summary_command)
cli.add_command(inspect.tag_scores_command)
