"""FastAPI application exposing status callbacks and analysis results."""
