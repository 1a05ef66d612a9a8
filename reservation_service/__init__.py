"""Room reservation lifecycle service."""
