"""Google authentication via the OAuth 2.0 installed application flow.

The user's browser opens to Google's consent page and the authorization
code comes back through a loopback redirect to a local HTTP server.
One token covers both Gmail and Drive and is persisted to
~/.config/mailpdf/credentials/token.json
"""

import json
import logging
import os

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from mailpdf.config.paths import TOKEN_FILE, ensure_credentials_dir

logger = logging.getLogger(__name__)

# - gmail.modify: read messages, unstar, mark as read
# - gmail.send: email rendered documents
# - drive.file: create folders/files and convert HTML to PDF
SCOPES = [
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/drive.file",
]

CLIENT_SECRET_ENV = "MAILPDF_GMAIL_CLIENT_SECRET"

REDIRECT_PORT = 8080


def _load_token() -> Credentials | None:
    """Load cached credentials, or None if missing or unreadable."""
    if not TOKEN_FILE.exists():
        return None

    try:
        return Credentials.from_authorized_user_file(str(TOKEN_FILE), SCOPES)
    except (ValueError, json.JSONDecodeError) as e:
        # Invalid token file - will re-authenticate
        logger.debug("Ignoring unreadable token file %s: %s", TOKEN_FILE, e)
        return None


def _save_token(creds: Credentials) -> None:
    """Persist credentials to disk with owner-only permissions."""
    ensure_credentials_dir()
    TOKEN_FILE.write_text(creds.to_json())
    TOKEN_FILE.chmod(0o600)


def get_client_secret(account_config: dict) -> str | None:
    """Client secret from MAILPDF_GMAIL_CLIENT_SECRET, else from config."""
    return os.environ.get(CLIENT_SECRET_ENV) or account_config.get("client_secret")


def _build_client_config(client_id: str, client_secret: str) -> dict:
    """Client configuration in the shape InstalledAppFlow expects.

    This is normally downloaded from Cloud Console as JSON; we build it
    from config values instead.
    """
    return {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [f"http://localhost:{REDIRECT_PORT}"],
        }
    }


def authenticate_loopback_flow(client_id: str, client_secret: str) -> dict:
    """Run the browser consent flow and cache the resulting token.

    Args:
        client_id: Google Cloud OAuth client ID.
        client_secret: Google Cloud OAuth client secret.

    Returns:
        On success a dict with 'access_token'; on failure a dict with
        'error' and 'error_description'.
    """
    try:
        flow = InstalledAppFlow.from_client_config(
            _build_client_config(client_id, client_secret), scopes=SCOPES
        )
        creds = flow.run_local_server(
            port=REDIRECT_PORT,
            success_message="Authentication successful! You can close this window.",
        )
    except Exception as e:
        return {
            "error": "oauth_flow_failed",
            "error_description": f"OAuth 2.0 flow failed: {e}",
        }

    _save_token(creds)
    return {"access_token": creds.token}
