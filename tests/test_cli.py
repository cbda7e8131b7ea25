import json
import os

import pytest

from spo_cli import auth
from spo_cli.cli import run
from spo_cli.commands import find_command, get_commands, names

from conftest import ADMIN_URL


def test_find_command_resolves_alias_and_remaining_args():
    command, remaining = find_command(["spo", "sp", "set", "--enabled", "true"])

    assert command.name == names.SERVICEPRINCIPAL_SET
    assert remaining == ["--enabled", "true"]


def test_find_command_prefers_longest_name():
    command, remaining = find_command(["spo", "serviceprincipal", "grant", "list"])

    assert command.name == names.SERVICEPRINCIPAL_GRANT_LIST
    assert remaining == []


def test_command_names_and_aliases_are_unique():
    seen = []
    for command in get_commands():
        seen.extend([command.name] + command.alias())

    assert len(seen) == len(set(seen))


def test_unknown_command(capsys):
    assert run(["spo", "foo"]) == 1

    captured = capsys.readouterr()
    assert "Unknown command: spo foo" in captured.err
    assert names.SERVICEPRINCIPAL_SET in captured.out


def test_no_arguments_lists_commands(capsys):
    assert run([]) == 0
    assert names.HIDEDEFAULTTHEMES_GET in capsys.readouterr().out


def test_help_command_prints_remarks_and_examples(capsys):
    assert run(["help", "spo", "serviceprincipal", "set"]) == 0

    out = capsys.readouterr().out
    assert "Enable or disable the service principal" in out
    assert "--enabled" in out
    assert "Alias: spo sp set" in out
    assert "Enable the service principal without prompting for confirmation" in out


def test_help_flag(capsys):
    assert run(["spo", "cdn", "get", "--help"]) == 0
    assert "Public|Private" in capsys.readouterr().out


def test_unknown_option_is_reported(capsys):
    assert run(["spo", "status", "--foo"]) == 1
    assert "unrecognized arguments: --foo" in capsys.readouterr().err


def test_invalid_output_mode(capsys):
    assert run(["spo", "status", "--output", "xml"]) == 1
    assert "invalid choice: 'xml'" in capsys.readouterr().err


def test_invalid_configuration(monkeypatch, capsys):
    monkeypatch.setenv("SPO_CLI_TIMEOUT", "0")

    assert run(["spo", "status"]) == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_status_not_connected(capsys):
    assert run(["spo", "status"]) == 0
    assert capsys.readouterr().out.strip() == "Not connected to SharePoint Online"


def test_status_connected_json(connected_admin, capsys):
    assert run(["spo", "status", "-o", "json"]) == 0
    assert json.loads(capsys.readouterr().out) == {"connectedAs": "admin@contoso.com", "url": ADMIN_URL}


@pytest.mark.parametrize("args, message", [
    (["spo", "connect"], "Required argument url missing"),
    (["spo", "connect", "https://contoso.example.com"], "is not a valid SharePoint Online site URL"),
    (["spo", "connect", ADMIN_URL, "--authType", "certificate"], "certificate is not a valid authentication type"),
    (["spo", "connect", ADMIN_URL, "--authType", "password"], "Required option userName missing"),
    (["spo", "connect", ADMIN_URL, "--authType", "password", "-u", "a@contoso.com"], "Required option password missing"),
])
def test_connect_validation(args, message, capsys):
    assert run(args) == 1
    assert message in capsys.readouterr().err


def test_connect_and_disconnect(monkeypatch, capsys):
    calls = []

    def fake_login(url, config, auth_type=None, user_name=None, password=None):
        calls.append((url, auth_type, user_name, password))
        connection = auth.Connection(url=url, user_name=user_name, auth_type=auth_type, connected=True)
        connection.save(config)
        return connection

    monkeypatch.setattr(auth, "login", fake_login)
    monkeypatch.setattr(auth, "logout", lambda config: auth.Connection.clear(config))

    assert run(["spo", "connect", ADMIN_URL, "--authType", "password", "-u", "admin@contoso.com",
                "-p", "secret", "--verbose"]) == 0
    assert calls == [(ADMIN_URL, "password", "admin@contoso.com", "secret")]
    assert "Connected to the tenant admin site" in capsys.readouterr().out

    assert run(["spo", "disconnect"]) == 0
    assert run(["spo", "status"]) == 0
    assert "Not connected to SharePoint Online" in capsys.readouterr().out


def test_debug_prints_request_summary(connected_admin, sharepoint, capsys):
    sharepoint.process_query_response = [
        {"SchemaVersion": "15.0.0.0", "ErrorInfo": None}, 2, {"IsNull": False}, 3, True
    ]

    assert run(["spo", "cdn", "get", "--debug"]) == 0

    out = capsys.readouterr().out
    assert "SHAREPOINT REQUEST SUMMARY" in out
    assert "Process Query:" in out
    assert "Context Info:" in out


def test_debug_switch_does_not_leak_into_next_run(connected_admin, sharepoint, monkeypatch, capsys):
    monkeypatch.delenv("VERBOSE")
    sharepoint.process_query_response = [
        {"SchemaVersion": "15.0.0.0", "ErrorInfo": None}, 2, {"IsNull": False}, 3, False
    ]

    assert run(["spo", "cdn", "get", "--debug"]) == 0
    assert os.environ["DEBUG"] == "false"
    assert "VERBOSE" not in os.environ
    capsys.readouterr()

    assert run(["spo", "cdn", "get"]) == 0
    assert capsys.readouterr().out.strip() == "false"


def test_errors_are_printed_with_status_prefix(capsys):
    assert run(["spo", "sp", "set", "--enabled", "maybe"]) == 1
    assert capsys.readouterr().err.strip() == \
        "[!] Error: maybe is not a valid boolean value. Allowed values are true|false"
