"""Services package - reservation lifecycle logic."""
