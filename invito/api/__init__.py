"""API layer - FastAPI application, routes and live updates."""
