"""Core models, path mapping and listing scan."""
