"""Command-line interface for the title proxy."""
