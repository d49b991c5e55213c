"""Gmail ingestion module for rsvp-sheets.

Parses raw Gmail API responses into MailMessage objects and walks labeled
threads.

Usage:
    from rsvp_sheets.ingestion import GmailClient, parse_gmail_message

    label = GmailClient().find_label("Wedding RSVPs")
"""

from rsvp_sheets.ingestion.gmail import parse_gmail_message
from rsvp_sheets.ingestion.gmail_client import GmailClient, GmailLabel, GmailThread

__all__ = ["parse_gmail_message", "GmailClient", "GmailLabel", "GmailThread"]
