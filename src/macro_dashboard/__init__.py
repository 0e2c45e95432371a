"""Market indicator cache, historical backfill and growth metrics."""

__version__ = "0.1.0"
