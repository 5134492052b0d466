"""
Tests for the edgegrid-cli command-line interface
"""

import json
import re
from unittest.mock import patch

import pytest
import requests

from edgegrid_sdk.cli import main, parse_pairs
from edgegrid_sdk.exceptions import ValidationError

EDGERC_CONTENT = """[default]
client_secret = abcdefghijklmnopqrstuvwxyz1234567890ABCDEFG=
host = akab-host.luna.akamaiapis.net
access_token = akab-access
client_token = akab-client

[staging]
client_secret = c2VjcmV0
host = staging.akamaiapis.net
access_token = staging-access
client_token = staging-client
"""

AUTHORIZATION_LINE = re.compile(
    r'^Authorization: EG1-HMAC-SHA256 client_token=akab-client;access_token=akab-access;'
    r'timestamp=\d{8}T\d{2}:\d{2}:\d{2}\+0000;nonce=[0-9a-f-]{36};signature=\S+$',
    re.MULTILINE
)


@pytest.fixture
def edgerc(tmp_path, monkeypatch):
    for name in ('HOST', 'CLIENT_TOKEN', 'CLIENT_SECRET', 'ACCESS_TOKEN'):
        monkeypatch.delenv(f"AKAMAI_{name}", raising=False)
        monkeypatch.delenv(f"AKAMAI_STAGING_{name}", raising=False)

    path = tmp_path / ".edgerc"
    path.write_text(EDGERC_CONTENT, encoding="utf-8")
    return str(path)


def make_response(status_code=200, body=b'{"ok": true}', reason="OK"):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = body
    response._content_consumed = True
    response.encoding = "utf-8"
    return response


class TestSignCommand:
    """Test the sign subcommand"""

    def test_sign_relative_path(self, edgerc, capsys):
        """Relative paths are signed against the credential host"""
        exit_code = main(['--edgerc', edgerc, 'sign', 'GET', '/papi/v1/groups?a=1', '--show-data-to-sign'])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert AUTHORIZATION_LINE.search(output)
        assert "https\\takab-host.luna.akamaiapis.net\\t/papi/v1/groups?a=1" in output

    def test_sign_post_with_headers(self, edgerc, capsys):
        """Designated headers and bodies are signed"""
        exit_code = main([
            '--edgerc', edgerc, 'sign', 'post', 'https://akab-host.luna.akamaiapis.net/x',
            '--data', '{"a": 1}', '--header', 'X-Test: value', '--sign-header', 'X-Test',
            '--show-data-to-sign',
        ])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert "x-test:value" in output
        assert output.startswith("Data to sign: 'POST\\t")

    def test_invalid_header(self, edgerc, capsys):
        """Malformed header arguments are reported"""
        exit_code = main(['--edgerc', edgerc, 'sign', 'GET', '/x', '--header', 'no-separator'])

        assert exit_code == 1
        assert "Invalid header" in capsys.readouterr().err


class TestConfigCommand:
    """Test the config subcommand"""

    def test_show_masks_secret(self, edgerc, capsys):
        """The client secret is never printed in full"""
        exit_code = main(['--edgerc', edgerc, '--section', 'staging', 'config', 'show'])

        assert exit_code == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["client_token"] == "staging-client"
        assert shown["host"] == "https://staging.akamaiapis.net"
        assert shown["client_secret"] != "c2VjcmV0"

    def test_show_edgerc_format(self, edgerc, capsys):
        exit_code = main(['--edgerc', edgerc, '--section', 'staging', 'config', 'show', '--edgerc-format'])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert output.startswith("[staging]\n")
        assert "host = staging.akamaiapis.net" in output

    def test_missing_section(self, edgerc, capsys):
        """Unknown sections fail with a message"""
        exit_code = main(['--edgerc', edgerc, '--section', 'nope', 'config', 'show'])

        assert exit_code == 1
        assert "Invalid section 'nope'" in capsys.readouterr().err

    def test_missing_file(self, edgerc, tmp_path, capsys):
        exit_code = main(['--edgerc', str(tmp_path / "absent"), 'config', 'show'])

        assert exit_code == 1
        assert "Cannot read .edgerc file" in capsys.readouterr().err


class TestRequestCommand:
    """Test the request subcommand"""

    def test_request_success(self, edgerc, capsys):
        """Responses are printed with their status line"""
        with patch.object(requests.Session, "send", return_value=make_response(body=b'{"groups": []}')) as mock_send:
            exit_code = main(['--edgerc', edgerc, 'request', 'GET', '/papi/v1/groups', '--param', 'contractId=ctr_1'])

        assert exit_code == 0
        prepared = mock_send.call_args[0][0]
        assert prepared.url == "https://akab-host.luna.akamaiapis.net/papi/v1/groups?contractId=ctr_1"
        assert prepared.headers["Authorization"].startswith("EG1-HMAC-SHA256 client_token=akab-client;")

        output = capsys.readouterr().out
        assert output.startswith("HTTP 200 OK\n")
        assert '{"groups": []}' in output

    def test_request_http_error(self, edgerc, capsys):
        """Non-success responses exit with status 1"""
        with patch.object(requests.Session, "send", return_value=make_response(404, b"missing", "Not Found")):
            exit_code = main(['--edgerc', edgerc, 'request', 'GET', '/nothing'])

        assert exit_code == 1
        captured = capsys.readouterr()
        assert "HTTP 404 Not Found" in captured.out
        assert "Error: HTTP 404: Not Found" in captured.err

    def test_conflicting_bodies(self, edgerc, capsys):
        exit_code = main(['--edgerc', edgerc, 'request', 'POST', '/x', '--data', 'a', '--json', '{}'])

        assert exit_code == 1
        assert "Cannot specify both --data and --json" in capsys.readouterr().err


class TestMisc:
    """Test global options and helpers"""

    def test_check_compatibility(self, capsys):
        assert main(['--check-compatibility']) == 0
        assert "compatible" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage:" in capsys.readouterr().out

    def test_parse_pairs(self):
        assert parse_pairs(['a=1', 'b = 2=3'], '=', 'parameter') == {'a': '1', 'b': '2=3'}

        with pytest.raises(ValidationError):
            parse_pairs(['=1'], '=', 'parameter')
