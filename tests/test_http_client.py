"""
Unit tests for requests integration and the EdgeGrid HTTP client
"""

import io
import re
from unittest.mock import Mock, patch

import pytest
import requests

from edgegrid_sdk.config import EdgeGridConfig
from edgegrid_sdk.exceptions import (
    HttpStatusError,
    MissingCredentialError,
    ServerCommunicationError,
    ValidationError,
)
from edgegrid_sdk.http_client import (
    ClientSettings,
    EdgeGridHttpClient,
    create_client,
    raise_for_status,
)
from edgegrid_sdk.signing import (
    EdgeGridAuth,
    EdgeGridSigner,
    SignableRequest,
    create_signing_session,
    sign_prepared_request,
)

FIXED_TIMESTAMP = "20140321T19:34:21+0000"
FIXED_NONCE = "3e5bd1d8-5a1a-4b1c-9f2d-0a8e3b6c7d11"

AUTH_HEADER_PATTERN = re.compile(
    r'^EG1-HMAC-SHA256 client_token=ct;access_token=at;'
    r'timestamp=\d{8}T\d{2}:\d{2}:\d{2}\+0000;'
    r'nonce=[0-9a-f-]{36};signature=.+$'
)


def make_response(status_code=200, body=b'{"ok": true}', reason="OK"):
    """Build a requests.Response without a network connection"""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = body
    response._content_consumed = True
    response.encoding = "utf-8"
    return response


def fix_generators(signer):
    signer.nonce_generator = lambda: FIXED_NONCE
    signer.timestamp_generator = lambda: FIXED_TIMESTAMP


@pytest.fixture
def config():
    return EdgeGridConfig("ct", "cs", "at", "https://h")


@pytest.fixture
def reference_signer(config):
    return EdgeGridSigner(
        config,
        nonce_generator=lambda: FIXED_NONCE,
        timestamp_generator=lambda: FIXED_TIMESTAMP,
    )


class TestEdgeGridAuth:
    """Test the requests authentication hook"""

    def test_adds_authorization_header(self, config):
        """Prepared requests get an Authorization header"""
        prepared = requests.Request("GET", "https://h/papi/v1/groups", auth=EdgeGridAuth(config)).prepare()
        assert AUTH_HEADER_PATTERN.match(prepared.headers["Authorization"])

    def test_signature_covers_prepared_body(self, config, reference_signer):
        """JSON bodies are signed as encoded by requests"""
        auth = EdgeGridAuth(config)
        fix_generators(auth.signer)

        prepared = requests.Request(
            "POST", "https://h/p?x=1", json={"a": 1}, auth=auth
        ).prepare()

        expected = reference_signer.sign_request(
            SignableRequest("POST", "https://h/p?x=1", body=prepared.body)
        )
        assert prepared.headers["Authorization"] == expected.authorization

    @pytest.mark.parametrize("make_body", [
        lambda: io.BytesIO(b"abc"),
        lambda: (chunk for chunk in [b"a", b"bc"]),
    ])
    def test_streamed_body_signed_without_hash(self, config, reference_signer, make_body):
        """File-like and generator bodies are signed with an empty content hash"""
        auth = EdgeGridAuth(config)
        fix_generators(auth.signer)
        body = make_body()

        prepared = requests.Request("POST", "https://h/x", data=body, auth=auth).prepare()

        expected = reference_signer.sign_request(SignableRequest("POST", "https://h/x"))
        assert prepared.headers["Authorization"] == expected.authorization
        assert prepared.body is body

    def test_streamed_body_is_not_consumed(self, config):
        body = io.BytesIO(b"abc")
        requests.Request("POST", "https://h/x", data=body, auth=EdgeGridAuth(config)).prepare()
        assert body.read() == b"abc"

    def test_only_authorization_is_added(self, config):
        """No other header is added or changed"""
        unsigned = requests.Request("GET", "https://h/p", headers={"X-A": "1"}).prepare()
        signed = requests.Request("GET", "https://h/p", headers={"X-A": "1"}, auth=EdgeGridAuth(config)).prepare()

        added = set(signed.headers) - set(unsigned.headers)
        assert added == {"Authorization"}
        assert signed.headers["X-A"] == "1"

    def test_missing_credentials(self):
        """Incomplete credentials are rejected at construction"""
        with pytest.raises(MissingCredentialError):
            EdgeGridAuth(EdgeGridConfig("ct", "", "at", "h"))

    def test_sign_prepared_request(self, config):
        """Prepared requests can be signed after the fact"""
        prepared = requests.Request("GET", "https://h/p").prepare()
        assert "Authorization" not in prepared.headers

        result = sign_prepared_request(prepared, config)
        assert result is prepared
        assert AUTH_HEADER_PATTERN.match(prepared.headers["Authorization"])

    def test_create_signing_session(self, config, caplog):
        """Sessions carry the auth hook and known attributes"""
        session = create_signing_session(config, ["X-A"], verify=False, not_an_attribute=1)

        assert isinstance(session.auth, EdgeGridAuth)
        assert session.auth.signer.headers_to_sign == ("x-a",)
        assert session.verify is False
        assert "not_an_attribute" in caplog.text


class TestClientSettings:
    """Test client settings validation"""

    def test_defaults(self):
        settings = ClientSettings()
        assert settings.timeout == 30.0
        assert settings.retry_attempts == 0
        assert settings.verify_ssl is True

    def test_validation(self):
        """Invalid settings raise ValidationError"""
        with pytest.raises(ValidationError, match="Timeout must be positive"):
            ClientSettings(timeout=0)

        with pytest.raises(ValidationError, match="Retry attempts must be non-negative"):
            ClientSettings(retry_attempts=-1)

        with pytest.raises(ValidationError, match="Retry backoff factor must be non-negative"):
            ClientSettings(retry_backoff_factor=-0.1)


class TestEdgeGridHttpClient:
    """Test the signed HTTP client"""

    def test_build_url(self, config):
        """Paths resolve against the credential host"""
        client = EdgeGridHttpClient(config)
        assert client.build_url("/papi/v1/groups") == "https://h/papi/v1/groups"
        assert client.build_url("papi/v1/groups") == "https://h/papi/v1/groups"
        assert client.build_url("https://other/x") == "https://other/x"

    @pytest.mark.parametrize("fields", [
        ("", "cs", "at", "h"),
        ("ct", "", "at", "h"),
        ("ct", "cs", "", "h"),
        ("ct", "cs", "at", ""),
    ])
    def test_missing_credentials(self, fields):
        """Construction fails on any empty credential field"""
        with pytest.raises(MissingCredentialError):
            EdgeGridHttpClient(EdgeGridConfig(*fields))

    def test_request_is_signed(self, config):
        """Requests sent through the client carry an Authorization header"""
        client = EdgeGridHttpClient(config)

        with patch.object(client.session, "send", return_value=make_response()) as mock_send:
            response = client.get("/papi/v1/groups", params={"contractId": "ctr_1"})

        assert response.status_code == 200
        prepared = mock_send.call_args[0][0]
        assert prepared.url == "https://h/papi/v1/groups?contractId=ctr_1"
        assert AUTH_HEADER_PATTERN.match(prepared.headers["Authorization"])
        assert prepared.headers["User-Agent"].startswith("EdgeGrid-Python-SDK/")
        assert mock_send.call_args[1]["timeout"] == 30.0

    def test_designated_headers_are_signed(self, config):
        """Designated headers enter the signature"""
        client = EdgeGridHttpClient(config, headers_to_sign=["X-Custom"])
        fix_generators(client.auth.signer)

        with patch.object(client.session, "send", return_value=make_response()) as mock_send:
            client.get("/p", headers={"X-Custom": "a   b"})

        prepared = mock_send.call_args[0][0]
        expected = EdgeGridSigner(
            config,
            ["x-custom"],
            nonce_generator=lambda: FIXED_NONCE,
            timestamp_generator=lambda: FIXED_TIMESTAMP,
        ).sign_request(SignableRequest("GET", "https://h/p", headers={"X-Custom": "a b"}))

        assert prepared.headers["Authorization"] == expected.authorization

    def test_account_switch_key(self):
        """The account switch key is sent as a query parameter"""
        client = EdgeGridHttpClient(EdgeGridConfig("ct", "cs", "at", "h", account_switch_key="1-ABC"))

        with patch.object(client.session, "send", return_value=make_response()) as mock_send:
            client.get("/papi/v1/groups", params={"contractId": "ctr_1"})

        prepared = mock_send.call_args[0][0]
        assert prepared.url == "https://h/papi/v1/groups?contractId=ctr_1&accountSwitchKey=1-ABC"

    @patch("edgegrid_sdk.http_client.time.sleep")
    def test_retry_resigns_request(self, mock_sleep, config):
        """Each retry is signed with a fresh nonce"""
        client = EdgeGridHttpClient(config, settings=ClientSettings(retry_attempts=2))
        responses = [make_response(503, b"busy", "Service Unavailable"), make_response()]

        with patch.object(client.session, "send", side_effect=responses) as mock_send:
            response = client.post("/p", json={"a": 1})

        assert response.status_code == 200
        assert mock_send.call_count == 2
        first, second = (call[0][0].headers["Authorization"] for call in mock_send.call_args_list)
        assert first != second
        mock_sleep.assert_called_once_with(0.3)

    @patch("edgegrid_sdk.http_client.time.sleep")
    def test_retries_exhausted(self, mock_sleep, config):
        """The last retryable response is returned once retries run out"""
        client = EdgeGridHttpClient(config, settings=ClientSettings(retry_attempts=1))
        responses = [make_response(503, b"", "Service Unavailable"), make_response(503, b"", "Service Unavailable")]

        with patch.object(client.session, "send", side_effect=responses) as mock_send:
            response = client.get("/p")

        assert response.status_code == 503
        assert mock_send.call_count == 2
        assert mock_sleep.call_count == 1

    def test_no_retry_by_default(self, config):
        """Without retry settings a 503 is returned as-is"""
        client = EdgeGridHttpClient(config)

        with patch.object(client.session, "send", return_value=make_response(503, b"", "Service Unavailable")) as mock_send:
            response = client.get("/p")

        assert response.status_code == 503
        assert mock_send.call_count == 1

    def test_connection_error(self, config):
        """Network failures become ServerCommunicationError"""
        client = EdgeGridHttpClient(config)

        with patch.object(client.session, "send", side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(ServerCommunicationError) as exc_info:
                client.get("/p")

        assert exc_info.value.error_code == "CONNECTION_ERROR"

    @patch("edgegrid_sdk.http_client.time.sleep")
    def test_timeout_is_retried(self, mock_sleep, config):
        """Timeouts are retried when attempts remain"""
        client = EdgeGridHttpClient(config, settings=ClientSettings(retry_attempts=1, timeout=5.0))
        side_effect = [requests.exceptions.Timeout("slow"), requests.exceptions.Timeout("slow")]

        with patch.object(client.session, "send", side_effect=side_effect) as mock_send:
            with pytest.raises(ServerCommunicationError) as exc_info:
                client.get("/p")

        assert exc_info.value.error_code == "TIMEOUT"
        assert mock_send.call_count == 2

    def test_send_json(self, config):
        """JSON responses are decoded"""
        client = EdgeGridHttpClient(config)

        with patch.object(client.session, "send", return_value=make_response(body=b'{"groups": []}')):
            assert client.send_json("GET", "/papi/v1/groups") == {"groups": []}

    def test_send_json_http_error(self, config):
        """Non-success statuses raise HttpStatusError"""
        client = EdgeGridHttpClient(config)
        body = b'{"title": "Not Found"}'

        with patch.object(client.session, "send", return_value=make_response(404, body, "Not Found")):
            with pytest.raises(HttpStatusError) as exc_info:
                client.send_json("GET", "/missing")

        error = exc_info.value
        assert error.status_code == 404
        assert error.reason == "Not Found"
        assert error.body == body.decode()
        assert str(error) == "HTTP 404: Not Found"

    def test_send_json_invalid_body(self, config):
        """Undecodable JSON raises ServerCommunicationError"""
        client = EdgeGridHttpClient(config)

        with patch.object(client.session, "send", return_value=make_response(body=b"not json")):
            with pytest.raises(ServerCommunicationError) as exc_info:
                client.send_json("GET", "/p")

        assert exc_info.value.error_code == "INVALID_RESPONSE"

    def test_send_text_and_bytes(self, config):
        client = EdgeGridHttpClient(config)

        with patch.object(client.session, "send", return_value=make_response(body=b"hello")):
            assert client.send_text("GET", "/p") == "hello"
            assert client.send_bytes("GET", "/p") == b"hello"

    def test_context_manager_closes_session(self, config):
        session = Mock(spec=requests.Session)
        with EdgeGridHttpClient(config, session=session):
            pass
        session.close.assert_called_once()

    def test_create_client(self, config):
        client = create_client(config, timeout=5.0, retry_attempts=3, headers_to_sign=["X-A"])
        assert client.settings.timeout == 5.0
        assert client.settings.retry_attempts == 3
        assert client.auth.signer.headers_to_sign == ("x-a",)


class TestRaiseForStatus:
    """Test status error mapping"""

    def test_success_passes(self):
        raise_for_status(make_response(204, b"", "No Content"))

    def test_body_is_truncated(self):
        """Long bodies are kept as a snippet"""
        with pytest.raises(HttpStatusError) as exc_info:
            raise_for_status(make_response(500, b"x" * 5000, "Internal Server Error"))

        assert len(exc_info.value.body) == HttpStatusError.BODY_SNIPPET_LENGTH
        assert exc_info.value.http_status == 500
