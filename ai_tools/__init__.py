"""AI Tools API: structured generation gateway."""

__version__ = "1.0.0"
