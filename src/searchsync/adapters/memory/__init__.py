"""In-memory backend."""
