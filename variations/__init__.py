"""Product variations REST API."""
