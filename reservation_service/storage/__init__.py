"""Storage package - repositories and connection management."""
