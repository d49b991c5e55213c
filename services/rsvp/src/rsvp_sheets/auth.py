"""Google OAuth credentials shared by the Gmail and Sheets clients.

Expects an authorized-user token at ~/.rsvp-sheets/token.json (or under
RSVP_CONFIG_DIR) granting both scopes below.
"""

from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

TOKEN_FILE = "token.json"

SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/spreadsheets",
]


def token_path(config_dir: Path) -> Path:
    """Location of the OAuth token inside a config directory."""
    return config_dir / TOKEN_FILE


def load_credentials(config_dir: Path) -> Credentials:
    """Load (and refresh if needed) stored OAuth credentials.

    Args:
        config_dir: Directory containing token.json

    Raises:
        FileNotFoundError: If no token has been stored yet
    """
    path = token_path(config_dir)
    if not path.exists():
        raise FileNotFoundError(
            f"Google token not found at {path}\n\n"
            "Authorize an account with the Gmail read-only and Sheets scopes "
            "and save the authorized-user JSON there."
        )

    credentials = Credentials.from_authorized_user_file(str(path), SCOPES)

    # Refresh if expired
    if credentials.expired and credentials.refresh_token:
        credentials.refresh(Request())
        # Save refreshed token
        with open(path, "w") as f:
            f.write(credentials.to_json())

    return credentials
