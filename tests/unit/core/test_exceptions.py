"""Unit tests for the LocalAPI exception hierarchy."""

import pytest

from tailscale_localapi.core.exceptions import (
    ConfigurationError,
    ConnectionExhaustedError,
    CredentialDiscoveryError,
    LocalAPIConnectionError,
    LocalAPIError,
    LocalAPIRequestError,
    LocalAPIValidationError,
)


class TestLocalAPIError:
    """Tests for the base exception."""

    def test_default_message(self) -> None:
        error = LocalAPIError()
        assert error.message == "A Tailscale LocalAPI error occurred."
        assert str(error) == error.message

    def test_custom_message(self) -> None:
        error = LocalAPIError("boom")
        assert str(error) == "boom"
        assert repr(error) == "LocalAPIError('boom')"
        assert error.context == {}

    @pytest.mark.parametrize(
        "error",
        [
            CredentialDiscoveryError(shared_dir="/x", reason="r"),
            LocalAPIConnectionError(endpoint="/sock", path="/p"),
            ConnectionExhaustedError(attempts=6, transport="Unix socket"),
            LocalAPIRequestError(operation="logout", status_code=500),
            LocalAPIValidationError(field="delta", value=-1),
            ConfigurationError(config_path="/c.yaml"),
        ],
    )
    def test_hierarchy(self, error: LocalAPIError) -> None:
        """Test every client error can be caught as LocalAPIError."""
        assert isinstance(error, LocalAPIError)
        with pytest.raises(LocalAPIError):
            raise error


class TestCredentialDiscoveryError:
    def test_message_and_context(self) -> None:
        error = CredentialDiscoveryError(
            shared_dir="/Library/Tailscale",
            reason="Invalid port number: abc",
        )
        assert error.message == "Failed to read credentials: Invalid port number: abc"
        assert error.context == {
            "shared_dir": "/Library/Tailscale",
            "reason": "Invalid port number: abc",
        }


class TestLocalAPIRequestError:
    """Tests for non-success status errors."""

    def test_message_includes_status_and_body(self) -> None:
        error = LocalAPIRequestError(
            operation="get whois for 1.2.3.4",
            status_code=404,
            body="no match for IP:port",
        )
        assert error.message == "Failed to get whois for 1.2.3.4: 404 no match for IP:port"
        assert error.body == "no match for IP:port"

    def test_empty_body_has_no_trailing_space(self) -> None:
        error = LocalAPIRequestError(operation="logout", status_code=500)
        assert error.message == "Failed to logout: 500"

    def test_context(self) -> None:
        error = LocalAPIRequestError(operation="logout", status_code=403, body="denied")
        assert error.context == {"operation": "logout", "status_code": 403, "body": "denied"}
        assert "logout" in repr(error)


class TestConnectionExhaustedError:
    def test_message(self) -> None:
        error = ConnectionExhaustedError(
            attempts=6,
            transport="localhost TCP",
            last_error="connection refused",
        )
        assert "localhost TCP" in error.message
        assert "6 attempts" in error.message
        assert error.context["last_error"] == "connection refused"


class TestValidationAndConfigErrors:
    def test_validation_default_message(self) -> None:
        error = LocalAPIValidationError(field="delta", value=-3)
        assert error.message == "Invalid value for delta: -3"
        assert error.context["field"] == "delta"

    def test_validation_custom_message(self) -> None:
        error = LocalAPIValidationError(field="transfer-encoding", value="chunked", message="Unexpected chunking")
        assert str(error) == "Unexpected chunking"

    def test_configuration_error_with_key(self) -> None:
        error = ConfigurationError(config_path="/c.yaml", key="transport.timeout")
        assert "transport.timeout" in error.message
        assert error.context["config_path"] == "/c.yaml"

    def test_connection_error_context(self) -> None:
        error = LocalAPIConnectionError(endpoint="/var/run/tailscaled.socket", path="/localapi/v0/status")
        assert error.context == {
            "endpoint": "/var/run/tailscaled.socket",
            "path": "/localapi/v0/status",
        }
