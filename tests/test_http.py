"""
Tests for the shared HTTP helpers.
"""
import pytest
import requests

from sihiri_sdk.exceptions import NetworkError
from sihiri_sdk.http import USER_AGENT, create_session, raise_for_server_error, send

URL = "http://localhost:3999/v2/info"


def test_session_user_agent(requests_mock):
    requests_mock.get(URL, json={})
    send(create_session(), "GET", URL)
    assert requests_mock.last_request.headers["User-Agent"] == USER_AGENT


def test_custom_user_agent():
    assert create_session("gallery/1.0").headers["User-Agent"] == "gallery/1.0"


def test_error_status_returned(requests_mock):
    requests_mock.get(URL, status_code=404)
    assert send(create_session(), "GET", URL).status_code == 404


def test_timeout(requests_mock):
    requests_mock.get(URL, exc=requests.exceptions.ConnectTimeout)
    with pytest.raises(NetworkError) as exc_info:
        send(create_session(), "GET", URL, timeout=1)
    assert exc_info.value.error_code == "TIMEOUT"


def test_connection_failure(requests_mock):
    requests_mock.get(URL, exc=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(NetworkError) as exc_info:
        send(create_session(), "GET", URL)
    assert exc_info.value.error_code == "CONNECTION_FAILED"


class TestServerErrors:

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_raises(self, status):
        response = requests.Response()
        response.status_code = status
        with pytest.raises(NetworkError) as exc_info:
            raise_for_server_error(response, "Read-only call")
        assert exc_info.value.status_code == status

    @pytest.mark.parametrize("status", [200, 400, 404])
    def test_passes(self, status):
        response = requests.Response()
        response.status_code = status
        raise_for_server_error(response, "Read-only call")
