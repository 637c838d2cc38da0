# tests/conftest.py
import json

import pytest

import trips.service
import user_auth.utils
from app import create_app
from fake_firestore import FakeFirestore, fake_run_transaction

API_BASE = "http://trips.test"


def fake_verify_id_token(id_token):
    if not id_token.startswith("token-"):
        raise ValueError("invalid token")
    return {"uid": id_token[len("token-"):]}


@pytest.fixture
def db(monkeypatch):
    monkeypatch.setattr(trips.service, "run_transaction", fake_run_transaction)
    return FakeFirestore()


@pytest.fixture
def app(db, monkeypatch):
    monkeypatch.setattr(user_auth.utils.auth, "verify_id_token", fake_verify_id_token)
    flask_app = create_app(db)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


def auth_headers(uid):
    return {"Authorization": f"Bearer token-{uid}"}


class FlaskResponse:
    """Wraps a Flask test response in the subset of requests.Response the client uses."""

    def __init__(self, response):
        self.status_code = response.status_code
        self.ok = response.status_code < 400
        self.text = response.get_data(as_text=True)

    def json(self):
        return json.loads(self.text)


class FlaskSession:
    """requests.Session look-alike that routes calls into the Flask test client."""

    def __init__(self, test_client, api_base=API_BASE):
        self.test_client = test_client
        self.api_base = api_base
        self.calls = []

    def _path(self, url):
        assert url.startswith(self.api_base)
        return url[len(self.api_base):]

    def post(self, url, json=None, headers=None, timeout=None):
        assert timeout is not None
        self.calls.append(("POST", self._path(url)))
        return FlaskResponse(self.test_client.post(self._path(url), json=json, headers=headers or {}))

    def get(self, url, headers=None, timeout=None):
        assert timeout is not None
        self.calls.append(("GET", self._path(url)))
        return FlaskResponse(self.test_client.get(self._path(url), headers=headers or {}))


@pytest.fixture
def flask_session(client):
    return FlaskSession(client)


class ManualTimer:
    """threading.Timer replacement whose callback fires only when the test says so."""

    created = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.cancelled = False
        self.started = False
        self.daemon = False
        ManualTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args, **self.kwargs)


@pytest.fixture
def manual_timers():
    ManualTimer.created = []
    return ManualTimer
