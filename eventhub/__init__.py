"""In-memory service layer for an events platform: events, categories, interests, communities, reviews and matching."""

__version__ = "0.1.0"