"""Command-line interface for rsvp-sheets."""
