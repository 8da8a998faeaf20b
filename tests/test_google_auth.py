import json

import pytest
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials

from services import google_auth
from services.google_auth import SCOPES, GoogleAuth, StaticTokenAuth
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials

from services import google_auth
from services.google_auth import SCOPES, GoogleAuth, StaticTokenAuth


def _write_token(path, **extra):
    data = {
        "token": "access-1",
        "refresh_token": "refresh-1",
        "client_id": "client.apps.googleusercontent.com",
        "client_secret": "secret",
        "scopes": SCOPES,
    }
    data.update(extra)
    path.write_text(json.dumps(data), encoding="utf-8")


def test_static_token_auth():
    assert StaticTokenAuth("tok").get_access_token() == "tok"
    assert StaticTokenAuth("tok").has_calendar_permissions()
    assert StaticTokenAuth("tok", scopes=SCOPES).has_calendar_permissions()
    assert not StaticTokenAuth("tok", scopes=SCOPES[:1]).has_calendar_permissions()
    assert StaticTokenAuth("").get_access_token() is None
    assert not StaticTokenAuth(None).has_calendar_permissions()


def test_no_cached_token(tmp_path):
    auth = GoogleAuth(tmp_path / "client_secret.json", tmp_path / "token.json")

    assert auth.get_access_token() is None
    assert not auth.has_calendar_permissions()


def test_cached_token_is_used(tmp_path):
    token_path = tmp_path / "token.json"
    _write_token(token_path)
    auth = GoogleAuth(tmp_path / "client_secret.json", token_path)

    assert auth.get_access_token() == "access-1"
    assert auth.has_calendar_permissions()


def test_unreadable_token_file(tmp_path):
    token_path = tmp_path / "token.json"
    token_path.write_text("{broken", encoding="utf-8")
    auth = GoogleAuth(tmp_path / "client_secret.json", token_path)

    assert auth.get_access_token() is None


def test_reset_credentials_removes_token(tmp_path):
    token_path = tmp_path / "token.json"
    _write_token(token_path)
    auth = GoogleAuth(tmp_path / "client_secret.json", token_path)
    auth.get_access_token()

    auth.reset_credentials()

    assert not token_path.exists()
    assert auth.get_access_token() is None


def test_expired_token_is_refreshed_and_saved(tmp_path, monkeypatch):
    token_path = tmp_path / "token.json"
    _write_token(token_path, expiry="2000-01-01T00:00:00Z")

    def refresh(self, request):
        self.token = "access-2"
        self.expiry = None

    monkeypatch.setattr(google_auth.Credentials, "refresh", refresh)
    auth = GoogleAuth(tmp_path / "client_secret.json", token_path)

    assert auth.get_access_token() == "access-2"
    assert json.loads(token_path.read_text(encoding="utf-8"))["token"] == "access-2"


def test_failed_refresh_gives_no_token(tmp_path, monkeypatch):
    token_path = tmp_path / "token.json"
    _write_token(token_path, expiry="2000-01-01T00:00:00Z")

    def refresh(self, request):
        raise RefreshError("invalid_grant")

    monkeypatch.setattr(google_auth.Credentials, "refresh", refresh)
    auth = GoogleAuth(tmp_path / "client_secret.json", token_path)

    assert auth.get_access_token() is None
    assert json.loads(token_path.read_text(encoding="utf-8"))["token"] == "access-1"


class _FakeFlow:
    def __init__(self, creds):
        self.creds = creds
        self.opened = []

    def run_local_server(self, **kwargs):
        self.opened.append(kwargs)
        return self.creds


def _install_flow(monkeypatch, creds):
    flow = _FakeFlow(creds)
    requested = []

    class FakeInstalledAppFlow:
        @staticmethod
        def from_client_secrets_file(path, scopes):
            requested.append((path, list(scopes)))
            return flow

    monkeypatch.setattr(google_auth, "InstalledAppFlow", FakeInstalledAppFlow)
    return flow, requested


def _granted(token="fresh", scopes=SCOPES):
    return Credentials(
        token=token,
        refresh_token="refresh-9",
        token_uri="https://oauth2.googleapis.com/token",
        client_id="client.apps.googleusercontent.com",
        client_secret="secret",
        scopes=list(scopes),
    )


def test_login_replaces_token_without_calendar_scopes(tmp_path, monkeypatch):
    token_path = tmp_path / "token.json"
    secrets_path = tmp_path / "client_secret.json"
    secrets_path.write_text("{}", encoding="utf-8")
    _write_token(token_path, scopes=["https://www.googleapis.com/auth/drive.appdata"])
    flow, requested = _install_flow(monkeypatch, _granted())
    auth = GoogleAuth(secrets_path, token_path)

    assert not auth.has_calendar_permissions()
    creds = auth.login()

    assert creds.token == "fresh"
    assert requested == [(str(secrets_path), SCOPES)]
    assert flow.opened[0]["access_type"] == "offline"
    assert json.loads(token_path.read_text(encoding="utf-8"))["token"] == "fresh"
    assert auth.has_calendar_permissions()


def test_login_reuses_valid_token(tmp_path, monkeypatch):
    token_path = tmp_path / "token.json"
    _write_token(token_path)
    flow, requested = _install_flow(monkeypatch, _granted())
    auth = GoogleAuth(tmp_path / "client_secret.json", token_path)

    assert auth.login().token == "access-1"
    assert requested == []
    assert flow.opened == []


def test_login_without_client_secrets(tmp_path, monkeypatch):
    _install_flow(monkeypatch, _granted())
    auth = GoogleAuth(tmp_path / "missing.json", tmp_path / "token.json")

    with pytest.raises(FileNotFoundError):
        auth.login()


def test_login_rejects_partial_consent(tmp_path, monkeypatch):
    secrets_path = tmp_path / "client_secret.json"
    secrets_path.write_text("{}", encoding="utf-8")
    _install_flow(monkeypatch, _granted(scopes=SCOPES[:1]))
    auth = GoogleAuth(secrets_path, tmp_path / "token.json")

    with pytest.raises(RuntimeError):
        auth.login()
    assert not (tmp_path / "token.json").exists()
