"""Web-side services."""
