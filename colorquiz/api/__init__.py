"""FastAPI application, dependencies and middleware."""
