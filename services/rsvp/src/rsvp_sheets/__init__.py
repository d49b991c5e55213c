"""rsvp-sheets: copy wedding RSVP emails from a Gmail label into a Google Sheet."""

__version__ = "0.1.0"
