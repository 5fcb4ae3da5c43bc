"""Domain rules for habit tracking."""
