"""Schema creation command."""

import click

from reelrating.database import engine
from reelrating.metadata import Base


@click.command(name='init-db')
def init_db_command():
    """Create rating, tag and movie tables that do not exist yet.

    Production databases are managed with Alembic; this is for local setups.
    """
    Base.metadata.create_all(bind=engine)
    click.echo(f"Created tables: {', '.join(sorted(Base.metadata.tables))}")
