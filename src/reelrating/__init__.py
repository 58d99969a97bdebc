"""ReelRating - movie rating and tag aggregation service."""

__version__ = "0.1.0"
