"""Knowtes REST API package.

Sub-modules expose FastAPI routers for each domain:
- auth: registration, JWT login, token refresh, current user
- topics: topic CRUD and hierarchy listing
- notes: note CRUD within a topic
- summaries: AI summary generation, acceptance and rejection
"""
