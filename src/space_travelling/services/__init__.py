"""Page generation and content helpers."""
