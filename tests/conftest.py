import json

import pytest

from spo_cli import auth
from spo_cli import spo_api
from spo_cli.config import parse_config
from spo_cli.monitoring import request_monitor

ADMIN_URL = "https://contoso-admin.sharepoint.com"
SITE_URL = "https://contoso.sharepoint.com/sites/team"


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, body=None, headers=None, reason="OK"):
        self.status_code = status_code
        if body is None:
            self.text = ""
        elif isinstance(body, str):
            self.text = body
        else:
            self.text = json.dumps(body)
        self.headers = headers or {}
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return json.loads(self.text)


class FakeSharePoint:
    """Records requests and answers them like SharePoint Online would."""

    def __init__(self):
        self.requests = []
        self.process_query_response = [
            {"SchemaVersion": "15.0.0.0", "LibraryVersion": "16.0.7018.1204", "ErrorInfo": None, "TraceCorrelationId": "1"}
        ]
        self.get_responses = {}
        self.post_responses = {}
        self.context_info = {"FormDigestValue": "0x1234,01 Jan 2020", "FormDigestTimeoutSeconds": 1800}

    @property
    def process_queries(self):
        return [r for r in self.requests if r["url"].endswith("/_vti_bin/client.svc/ProcessQuery")]

    def post(self, url, headers=None, data=None, json=None, timeout=None):
        self.requests.append({"method": "POST", "url": url, "headers": headers, "data": data, "json": json})
        if url.endswith("/_api/contextinfo"):
            return FakeResponse(body=self.context_info)
        if url.endswith("/_vti_bin/client.svc/ProcessQuery"):
            return FakeResponse(body=self.process_query_response)
        if url in self.post_responses:
            return FakeResponse(body=self.post_responses[url])
        return FakeResponse(status_code=404, reason="Not Found")

    def get(self, url, headers=None, timeout=None):
        self.requests.append({"method": "GET", "url": url, "headers": headers, "data": None, "json": None})
        if url in self.get_responses:
            return FakeResponse(body=self.get_responses[url])
        return FakeResponse(status_code=404, reason="Not Found")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep connection files, tokens and debug switches local to each test."""
    monkeypatch.setenv("SPO_CLI_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("VERBOSE", "false")
    auth.access_token_cache.clear()
    request_monitor.reset()
    yield
    auth.access_token_cache.clear()


@pytest.fixture
def config():
    return parse_config()


def _connect(config, url):
    connection = auth.Connection(url=url, user_name="admin@contoso.com", auth_type="deviceCode",
                                 tenant="tenant-id", connected=True)
    connection.save(config)
    return connection


@pytest.fixture
def connected_admin(config):
    return _connect(config, ADMIN_URL)


@pytest.fixture
def connected_site(config):
    return _connect(config, SITE_URL)


@pytest.fixture
def access_token(monkeypatch):
    """Serve a fixed access token without talking to Azure AD."""
    calls = []

    def fake_ensure_access_token(resource, config, connection=None):
        calls.append(resource)
        return "ABC"

    monkeypatch.setattr(auth, "ensure_access_token", fake_ensure_access_token)
    return calls


@pytest.fixture
def sharepoint(monkeypatch, access_token):
    fake = FakeSharePoint()
    monkeypatch.setattr(spo_api.requests, "post", fake.post)
    monkeypatch.setattr(spo_api.requests, "get", fake.get)
    return fake


@pytest.fixture
def no_prompt(monkeypatch):
    """Fail the test if the command asks for confirmation."""
    def fail_input(prompt=""):
        raise AssertionError(f"Unexpected prompt: {prompt}")

    monkeypatch.setattr("builtins.input", fail_input)


@pytest.fixture
def answer_prompt(monkeypatch):
    """Answer confirmation prompts with the given reply and record the questions."""
    prompts = []

    def set_answer(reply):
        def fake_input(prompt=""):
            prompts.append(prompt)
            return reply

        monkeypatch.setattr("builtins.input", fake_input)
        return prompts

    return set_answer
