"""Knowtes: topics, notes and AI summaries over a REST API."""

__version__ = "0.1.0"
