"""Adapters connecting the router to destinations and to stdlib logging."""
