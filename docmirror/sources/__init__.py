"""Repository and asset sources."""
