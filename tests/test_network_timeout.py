"""Unit tests for the ledger gateway transport."""

import pytest
from unittest.mock import Mock, patch
from requests.exceptions import Timeout, ConnectionError, HTTPError

from timelock_wallet.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    TimeoutConfig,
    classify_error,
    create_network_error,
    DEFAULT_TIMEOUT_CONFIG,
)


class TestTimeoutConfig:
    def test_default_values(self):
        config = TimeoutConfig()
        assert config.connect_timeout == 5.0
        assert config.read_timeout == 15.0

    def test_request_timeout_tuple(self):
        config = TimeoutConfig(connect_timeout=3.0, read_timeout=10.0)
        assert config.request_timeout == (3.0, 10.0)


class TestClassifyError:
    def test_classify_timeout(self):
        assert classify_error(Timeout("timed out")) == NetworkErrorType.TIMEOUT

    def test_classify_connection_error(self):
        assert classify_error(ConnectionError("refused")) == NetworkErrorType.CONNECTION_ERROR

    def test_classify_http_error(self):
        response = Mock()
        response.status_code = 500
        assert classify_error(HTTPError(response=response)) == NetworkErrorType.HTTP_ERROR

    def test_classify_unknown_error(self):
        assert classify_error(ValueError("Some error")) == NetworkErrorType.UNKNOWN


class TestCreateNetworkError:
    def test_create_timeout_error(self):
        error = Timeout("Connection timed out")
        network_error = create_network_error(error, "http://gateway.test", "Fetch locks")
        assert network_error.error_type == NetworkErrorType.TIMEOUT
        assert network_error.message.startswith("Fetch locks: ")
        assert "gateway.test" in network_error.message
        assert network_error.original_error == error

    def test_create_http_error_uses_gateway_message(self):
        response = Mock()
        response.status_code = 409
        response.text = '{"message": "Lock is still locked"}'
        network_error = create_network_error(
            HTTPError(response=response), "http://gateway.test", "Withdraw lock"
        )
        assert network_error.status_code == 409
        assert network_error.message == "Withdraw lock: HTTP error 409: Lock is still locked"

    def test_create_http_error_plain_text(self):
        response = Mock()
        response.status_code = 500
        response.text = "Internal Server Error"
        network_error = create_network_error(HTTPError(response=response), "http://gateway.test")
        assert network_error.response_text == "Internal Server Error"
        assert "Internal Server Error" in network_error.message

    def test_create_unknown_error(self):
        network_error = create_network_error(ValueError("odd failure"), "http://gateway.test")
        assert network_error.error_type == NetworkErrorType.UNKNOWN
        assert "odd failure" in network_error.message


class TestNetworkClient:
    def test_init_default_config(self):
        client = NetworkClient("http://gateway.test/")
        assert client.base_url == "http://gateway.test"
        assert client.timeout_config == DEFAULT_TIMEOUT_CONFIG

    def test_get_passes_timeout(self):
        client = NetworkClient(
            "http://gateway.test", timeout_config=TimeoutConfig(2.0, 4.0)
        )
        with patch("requests.get") as mock_get:
            mock_get.return_value.json.return_value = {"data": []}
            assert client.get("/timelocks", params={"owner": "T"}) == {"data": []}
        mock_get.assert_called_once_with(
            "http://gateway.test/timelocks", timeout=(2.0, 4.0), params={"owner": "T"}
        )

    def test_put_empty_body(self):
        client = NetworkClient("http://gateway.test")
        with patch("requests.put") as mock_put:
            mock_put.return_value.content = b""
            assert client.put("/timelocks", data="{}") == {"message": ""}

    def test_put_non_json_body(self):
        client = NetworkClient("http://gateway.test")
        with patch("requests.put") as mock_put:
            mock_put.return_value.content = b"accepted"
            mock_put.return_value.text = "accepted"
            mock_put.return_value.json.side_effect = ValueError("not json")
            assert client.put("/timelocks", data="{}") == {"message": "accepted"}

    def test_failed_request_is_attempted_once(self):
        client = NetworkClient("http://gateway.test")
        with patch("requests.put") as mock_put:
            mock_put.side_effect = ConnectionError("refused")
            with pytest.raises(NetworkError) as exc_info:
                client.put("/timelocks", context="Create lock", data="{}")
        assert mock_put.call_count == 1
        assert exc_info.value.error_type == NetworkErrorType.CONNECTION_ERROR

    def test_timeout_is_reported_with_context(self):
        client = NetworkClient("http://gateway.test")
        with patch("requests.get") as mock_get:
            mock_get.side_effect = Timeout("Timeout")
            with pytest.raises(NetworkError) as exc_info:
                client.get("/timelocks", context="Fetch locks")
        assert mock_get.call_count == 1
        assert exc_info.value.error_type == NetworkErrorType.TIMEOUT
        assert exc_info.value.message.startswith("Fetch locks: ")
