"""API Layer - FastAPI routes, request dependencies and error handlers."""
