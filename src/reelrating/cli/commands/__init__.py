"""CLI commands package."""

from . import (
    database,
    inspect,
)

__all__ = [
    'database',
    'inspect',
]
