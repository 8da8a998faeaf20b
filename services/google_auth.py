# synapse/services/google_auth.py
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from core.settings import CALENDAR_SYNC, CLIENT_SECRET_PATH, TOKEN_PATH


SCOPES = list(CALENDAR_SYNC.scopes)

logger = logging.getLogger("synapse.auth")


class StaticTokenAuth:
    """Bearer token handed over by an outer session (e.g. a web login)."""

    def __init__(self, access_token: Optional[str], scopes: Optional[Iterable[str]] = None):
        self.access_token = access_token or None
        self.scopes = set(scopes) if scopes is not None else None

    def get_access_token(self) -> Optional[str]:
        return self.access_token

    def has_calendar_permissions(self) -> bool:
        if not self.access_token:
            return False
        if self.scopes is None:
            # scopes were granted upstream and not reported back
            return True
        return all(scope in self.scopes for scope in SCOPES)


class GoogleAuth:
    """Installed-app OAuth credentials cached in ``token.json``.

    ``get_access_token`` never opens a browser; ``login`` is the only path
    that runs the consent flow.
    """

    def __init__(
        self,
        secrets_path: str | Path = CLIENT_SECRET_PATH,
        token_path: str | Path = TOKEN_PATH,
    ):
        self.secrets_path = Path(secrets_path)
        self.token_path = Path(token_path)
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.creds: Optional[Credentials] = None
        logger.debug("Token path: %s", self.token_path)

    # ----- collaborator interface -----
    def get_access_token(self) -> Optional[str]:
        creds = self._load_cached_credentials()
        if creds is None:
            return None
        if not creds.valid and not self._refresh(creds):
            return None
        return creds.token

    def has_calendar_permissions(self) -> bool:
        creds = self._load_cached_credentials()
        return bool(creds and _has_calendar_scopes(creds))

    # ----- interactive login -----
    def login(self) -> Credentials:
        """Return calendar-scoped credentials, asking the user for consent if needed."""
        creds = self._load_cached_credentials()
        if creds is not None and not _has_calendar_scopes(creds):
            logger.info("Cached token lacks calendar scopes; requesting consent again")
            self.reset_credentials()
            creds = None
        if creds is not None and (creds.valid or self._refresh(creds)):
            return creds

        if not self.secrets_path.exists():
            raise FileNotFoundError(
                f"Client secrets not found at {self.secrets_path}. "
                "Create a Desktop OAuth client in Google Cloud and download its JSON."
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(self.secrets_path), SCOPES)
        logger.info("Running OAuth consent flow (local server)")
        creds = flow.run_local_server(
            port=0,
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )
        if not creds or not _has_calendar_scopes(creds):
            raise RuntimeError("Google authorization is missing the calendar scopes")
        self.creds = creds
        self._persist_credentials(creds)
        logger.info("Granted scopes: %s", ", ".join(sorted(creds.scopes or [])))
        return creds

    def reset_credentials(self) -> None:
        self.creds = None
        try:
            if self.token_path.exists():
                self.token_path.unlink()
                logger.info("Removed cached Google token")
        except OSError as exc:
            logger.warning("Failed to remove cached token: %s", exc)

    # ----- helpers -----
    def _refresh(self, creds: Credentials) -> bool:
        if not (creds.expired and creds.refresh_token):
            return False
        try:
            creds.refresh(Request())
        except (RefreshError, TransportError) as exc:
            logger.warning("Token refresh failed: %s", exc)
            return False
        self._persist_credentials(creds)
        return True

    def _load_cached_credentials(self) -> Optional[Credentials]:
        if self.creds is not None:
            return self.creds
        if not self.token_path.exists():
            return None
        try:
            # scopes come from the file so a token granted for less is detected
            self.creds = Credentials.from_authorized_user_file(str(self.token_path))
        except (ValueError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load token.json: %s", exc)
            self.creds = None
        return self.creds

    def _persist_credentials(self, creds: Credentials) -> None:
        data = creds.to_json()
        tmp_path = self.token_path.with_suffix(".tmp")
        try:
            tmp_path.write_text(data, encoding="utf-8")
            os.replace(tmp_path, self.token_path)
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass


def _has_calendar_scopes(creds: Credentials) -> bool:
    current = set(creds.scopes or [])
    return all(scope in current for scope in SCOPES)


__all__ = ["GoogleAuth", "SCOPES", "StaticTokenAuth"]
