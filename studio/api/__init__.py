"""API module - HTTP surface of the studio."""
