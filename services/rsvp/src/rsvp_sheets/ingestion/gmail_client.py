"""Gmail API client for reading labeled RSVP threads.

Exposes the label → threads → messages shape the sync pipeline walks:

    client = GmailClient()
    label = client.find_label("Wedding RSVPs")
    for thread in label.get_threads(0, 30):
        for message in thread.get_messages():
            ...
"""

from pathlib import Path

from googleapiclient.discovery import build, Resource

from rsvp_sheets.auth import load_credentials, token_path
from rsvp_sheets.config import DEFAULT_CONFIG_DIR
from rsvp_sheets.ingestion.gmail import parse_gmail_message
from rsvp_sheets.models import MailMessage, SkippedMail


class GmailThread:
    """A conversation under a label. Messages are fetched once, on demand.

    Messages that cannot be parsed are left out of get_messages() and
    recorded in `skipped`.
    """

    def __init__(self, service: Resource, thread_id: str):
        self._service = service
        self.thread_id = thread_id
        self._messages: list[MailMessage] | None = None
        self.skipped: list[SkippedMail] = []

    def get_messages(self) -> list[MailMessage]:
        """Fetch and parse every message in the thread, oldest first.

        Raises:
            HttpError: If the thread cannot be fetched
        """
        if self._messages is None:
            result = self._service.users().threads().get(
                userId="me",
                id=self.thread_id,
                format="full",
            ).execute()

            messages = []
            for raw in result.get("messages", []):
                try:
                    messages.append(parse_gmail_message(raw))
                except ValueError as e:
                    self.skipped.append(SkippedMail(
                        thread_id=self.thread_id,
                        message_id=raw.get("id"),
                        error=str(e),
                    ))
            self._messages = messages
        return self._messages

    def get_first_message_subject(self) -> str:
        """Subject of the first message, or "" if the thread is empty."""
        messages = self.get_messages()
        if not messages:
            return ""
        return messages[0].subject or ""


class GmailLabel:
    """A user label with offset-based thread paging.

    Gmail pages with opaque tokens and may return fewer threads than asked
    for. Thread ids listed so far are kept in order, so get_threads(offset,
    count) can keep listing until the window is filled.
    """

    def __init__(self, service: Resource, label_id: str, name: str):
        self._service = service
        self.label_id = label_id
        self.name = name
        # Thread ids in Gmail order, as far as listed
        self._thread_ids: list[str] = []
        self._next_token: str | None = None
        self._exhausted = False

    def _fetch_page(self, count: int) -> None:
        kwargs = {
            "userId": "me",
            "labelIds": [self.label_id],
            "maxResults": count,
        }
        if self._next_token:
            kwargs["pageToken"] = self._next_token

        result = self._service.users().threads().list(**kwargs).execute()
        threads = result.get("threads", [])
        self._thread_ids.extend(thread["id"] for thread in threads)
        self._next_token = result.get("nextPageToken")

        if not self._next_token or not threads:
            self._exhausted = True

    def get_threads(self, offset: int, count: int) -> list[GmailThread]:
        """Return up to `count` threads starting at `offset`.

        Fewer than `count` threads are returned only at the end of the
        label; an empty list means there are no more threads.

        Raises:
            HttpError: If a page cannot be listed
        """
        if count <= 0:
            return []

        end = offset + count
        while len(self._thread_ids) < end and not self._exhausted:
            self._fetch_page(end - len(self._thread_ids))

        return [
            GmailThread(self._service, thread_id)
            for thread_id in self._thread_ids[offset:end]
        ]


class GmailClient:
    """Minimal Gmail client for label and thread lookups."""

    def __init__(self, config_dir: Path | None = None, service: Resource | None = None):
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.token_path = token_path(self.config_dir)
        self._service = service

    def is_authenticated(self) -> bool:
        """Check if we have stored authentication tokens."""
        return self._service is not None or self.token_path.exists()

    def get_service(self) -> Resource:
        """Get authenticated Gmail API service.

        Raises:
            FileNotFoundError: If no token has been stored
        """
        if self._service:
            return self._service

        credentials = load_credentials(self.config_dir)
        self._service = build("gmail", "v1", credentials=credentials)
        return self._service

    def find_label(self, name: str) -> GmailLabel | None:
        """Look up a user label by its exact display name.

        Returns:
            GmailLabel, or None if no label has that name
        """
        service = self.get_service()
        result = service.users().labels().list(userId="me").execute()

        for label in result.get("labels", []):
            if label.get("name") == name:
                return GmailLabel(service, label["id"], name)

        return None
