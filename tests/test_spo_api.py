import pytest
import requests

from spo_cli import spo_api
from spo_cli.exceptions import CommandError, SharePointAPIError
from spo_cli.monitoring import request_monitor

from conftest import ADMIN_URL, FakeResponse


def test_parse_client_svc_response_raises_error_message():
    text = ('[{"SchemaVersion":"15.0.0.0","LibraryVersion":"16.0.7018.1204",'
            '"ErrorInfo":{"ErrorMessage":"Unknown Error","ErrorValue":null,"ErrorCode":-1,'
            '"ErrorTypeName":"Microsoft.SharePoint.Client.UnknownError"},"TraceCorrelationId":"x"}]')

    with pytest.raises(CommandError, match="Unknown Error"):
        spo_api.parse_client_svc_response(text)


def test_parse_client_svc_response_returns_array():
    text = '[{"SchemaVersion":"15.0.0.0","ErrorInfo":null},2,{"IsNull":false},3,true]'

    parsed = spo_api.parse_client_svc_response(text)

    assert parsed[-1] is True
    assert len(parsed) == 5


@pytest.mark.parametrize("text", ["<html>Sign in</html>", "{}", "[]"])
def test_parse_client_svc_response_rejects_unexpected_body(text):
    with pytest.raises(CommandError, match="Unexpected response"):
        spo_api.parse_client_svc_response(text)


def test_build_process_query_envelope():
    body = spo_api.build_process_query('<Method Name="Deny" Id="7" ObjectPathId="5" />',
                                       '<Constructor Id="5" TypeId="{x}" />', 'my-app')

    assert body.startswith('<Request AddExpandoFieldTypeSuffix="true" SchemaVersion="15.0.0.0" '
                           'LibraryVersion="16.0.0.0" ApplicationName="my-app" '
                           'xmlns="http://schemas.microsoft.com/sharepoint/clientquery/2009">')
    assert '<Actions><Method Name="Deny" Id="7" ObjectPathId="5" /></Actions>' in body
    assert body.endswith('<ObjectPaths><Constructor Id="5" TypeId="{x}" /></ObjectPaths></Request>')


def test_strip_object_type_keeps_other_keys():
    obj = {"_ObjectType_": "SP.Tenant", "_ObjectIdentity_": "id", "HideDefaultThemes": True}

    assert spo_api.strip_object_type(obj) == {"_ObjectIdentity_": "id", "HideDefaultThemes": True}
    assert "_ObjectType_" in obj


def test_child_items_of_empty_collection():
    assert spo_api.child_items({"_ObjectType_": "Collection", "_Child_Items_": []}) == []


def test_get_request_headers_decorates_user_agent():
    headers = spo_api.get_request_headers({"Authorization": "Bearer ABC"}, "spo-cli")

    assert headers["User-Agent"].startswith("NONISV|SharePointPnP|spo-cli/")
    assert headers["Authorization"] == "Bearer ABC"


@pytest.mark.parametrize("body, expected", [
    ({"odata.error": {"code": "-1", "message": {"lang": "en-US", "value": "File not found"}}}, "File not found"),
    ({"error": {"code": "-1", "message": {"value": "Access is denied."}}}, "Access is denied."),
    ({"error": {"code": "InvalidAuthenticationToken", "message": "Token expired"}}, "Token expired"),
    ({"error": "invalid_client", "error_description": "AADSTS7000215"}, "AADSTS7000215"),
    ("Service unavailable", "503 Service Unavailable"),
])
def test_get_error_message(body, expected):
    response = FakeResponse(status_code=503, body=body, reason="Service Unavailable")

    assert spo_api.get_error_message(response) == expected


def test_get_request_digest(config, monkeypatch):
    calls = []

    def fake_post(url, headers=None, data=None, json=None, timeout=None):
        calls.append((url, headers, timeout))
        return FakeResponse(body={"FormDigestValue": "0xABC", "FormDigestTimeoutSeconds": 1800})

    monkeypatch.setattr(spo_api.requests, "post", fake_post)

    context_info = spo_api.get_request_digest(ADMIN_URL, "TOKEN", config)

    assert context_info["FormDigestValue"] == "0xABC"
    url, headers, timeout = calls[0]
    assert url == f"{ADMIN_URL}/_api/contextinfo"
    assert headers["Authorization"] == "Bearer TOKEN"
    assert headers["Accept"] == "application/json;odata=nometadata"
    assert timeout == config.timeout


def test_make_spo_request_maps_connection_errors(monkeypatch, capsys):
    def fake_get(url, headers=None, timeout=None):
        raise requests.exceptions.ConnectionError("Name or service not known")

    monkeypatch.setattr(spo_api.requests, "get", fake_get)

    with pytest.raises(CommandError, match="Network connection failed"):
        spo_api.make_spo_request(f"{ADMIN_URL}/_api/web", {}, method="GET")

    assert "NETWORK CONNECTION FAILED" in capsys.readouterr().out


def test_make_spo_request_does_not_retry_throttled_requests(monkeypatch, capsys):
    calls = []

    def fake_post(url, headers=None, data=None, json=None, timeout=None):
        calls.append(url)
        return FakeResponse(status_code=429, reason="Too Many Requests", headers={"Retry-After": "120"})

    monkeypatch.setattr(spo_api.requests, "post", fake_post)

    with pytest.raises(SharePointAPIError) as exc_info:
        spo_api.make_spo_request(f"{ADMIN_URL}/_vti_bin/client.svc/ProcessQuery", {}, method="POST", data="<Request />")

    assert exc_info.value.status_code == 429
    assert len(calls) == 1
    assert request_monitor.metrics["throttled_requests"] == 1
    assert request_monitor.metrics["last_retry_after"] == "120"
    assert request_monitor.operations["process_query"] == 1
    assert "THROTTLING DETECTED" in capsys.readouterr().out


def test_execute_process_query_hides_token_in_debug_output(config, monkeypatch, capsys):
    monkeypatch.setenv("DEBUG", "true")

    def fake_post(url, headers=None, data=None, json=None, timeout=None):
        return FakeResponse(body=[{"SchemaVersion": "15.0.0.0", "ErrorInfo": None}, 3, True])

    monkeypatch.setattr(spo_api.requests, "post", fake_post)

    secret = "eyJ0eXAiOiJKV1QiLCJhbGciOiJSUzI1NiJ9.secret-part"
    parsed = spo_api.execute_process_query(ADMIN_URL, secret, "0xABC", "<Request />", config)

    out = capsys.readouterr().out
    assert parsed[-1] is True
    assert "Executing web request..." in out
    assert secret not in out


def test_post_json_sends_json_body(config, monkeypatch):
    calls = []

    def fake_post(url, headers=None, data=None, json=None, timeout=None):
        calls.append((url, headers, json))
        return FakeResponse(body={"value": True})

    monkeypatch.setattr(spo_api.requests, "post", fake_post)

    result = spo_api.post_json(f"{ADMIN_URL}/_api/thememanager/SetHideDefaultThemes", "TOKEN", config,
                               json_data={"hideDefaultThemes": True})

    assert result == {"value": True}
    url, headers, body = calls[0]
    assert body == {"hideDefaultThemes": True}
    assert headers["Accept"] == "application/json;odata=nometadata"
    assert request_monitor.operations["rest_post"] == 1


def test_parse_json_response_rejects_html():
    with pytest.raises(CommandError, match="Unexpected response from SharePoint: <html>"):
        spo_api.parse_json_response(FakeResponse(body="<html>Sign in</html>"))
