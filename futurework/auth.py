from __future__ import annotations

import logging

from google_auth_oauthlib.flow import InstalledAppFlow

from .config import SHEETS_SCOPES
from .errors import AuthRequired
from .sheets import SheetSession


logger = logging.getLogger(__name__)

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


def _client_config(client_id: str, client_secret: str | None) -> dict[str, dict[str, object]]:
    installed: dict[str, object] = {
        "client_id": client_id,
        "auth_uri": GOOGLE_AUTH_URI,
        "token_uri": GOOGLE_TOKEN_URI,
        "redirect_uris": ["http://localhost"],
    }
    if client_secret:
        installed["client_secret"] = client_secret
    return {"installed": installed}


def session_from_token(token: str | None) -> SheetSession | None:
    text = (token or "").strip()
    if not text:
        return None
    return SheetSession(access_token=text)


def authorize_interactive(
    client_id: str,
    client_secret: str | None = None,
    *,
    open_browser: bool = True,
) -> SheetSession:
    """Run the browser consent flow for spreadsheet read/write and return a session."""
    if not client_id or not client_id.strip():
        raise AuthRequired("A Google OAuth client ID is required to connect Sheets.")

    flow = InstalledAppFlow.from_client_config(
        _client_config(client_id.strip(), client_secret),
        scopes=list(SHEETS_SCOPES),
    )
    try:
        credentials = flow.run_local_server(port=0, open_browser=open_browser)
    except Exception as exc:
        raise AuthRequired(f"Google authorization failed: {exc}") from exc

    token = getattr(credentials, "token", None)
    if not token:
        raise AuthRequired("Google authorization did not return an access token.")
    logger.info("Obtained Sheets access token")
    return SheetSession(access_token=str(token))
