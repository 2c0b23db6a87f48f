"""Tests for eventdbx_native.config.ClientConfig."""

import pytest

from eventdbx_native import ClientConfig, ValidationError


class TestClientConfig:
    """Tests for ClientConfig construction and rendering."""

    def test_empty_config_renders_empty_object(self):
        """Unset fields are omitted so native defaults apply."""
        assert ClientConfig().to_dict() == {}

    def test_camel_case_keys(self):
        """Field names map to the native config keys."""
        config = ClientConfig(
            host="10.0.0.5",
            port=6363,
            token="secret",
            tenant_id="acme",
            no_noise=True,
            connect_timeout_ms=500,
            request_timeout_ms=2000,
            protocol_version=1,
        )
        assert config.to_dict() == {
            "host": "10.0.0.5",
            "port": 6363,
            "token": "secret",
            "tenantId": "acme",
            "noNoise": True,
            "connectTimeoutMs": 500,
            "requestTimeoutMs": 2000,
            "protocolVersion": 1,
        }

    def test_false_is_kept(self):
        """Explicit False is a value, not an unset field."""
        assert ClientConfig(no_noise=False).to_dict() == {"noNoise": False}

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_port_out_of_range(self, port):
        """Ports outside 1..65535 are rejected."""
        with pytest.raises(ValidationError, match="port"):
            ClientConfig(port=port)

    def test_negative_timeout(self):
        """Timeouts cannot be negative."""
        with pytest.raises(ValidationError) as exc_info:
            ClientConfig(request_timeout_ms=-1)
        assert exc_info.value.details["field"] == "request_timeout_ms"

    def test_repr_masks_token(self):
        """The token never appears in repr."""
        text = repr(ClientConfig(host="h", token="secret"))
        assert "secret" not in text
        assert "***" in text

    def test_to_dict_used_by_codec(self):
        """The codec serializes a config through to_dict()."""
        from eventdbx_native._codec import encode

        assert encode(ClientConfig(tenant_id="acme")) == b'{"tenantId":"acme"}'


class TestFromEnv:
    """Tests for ClientConfig.from_env()."""

    def test_reads_variables(self):
        """EVENTDBX_* variables populate the config."""
        config = ClientConfig.from_env(
            {
                "EVENTDBX_HOST": "db.internal",
                "EVENTDBX_PORT": "7000",
                "EVENTDBX_TOKEN": "tok",
                "EVENTDBX_TENANT_ID": "acme",
                "EVENTDBX_NO_NOISE": "true",
            }
        )
        assert config.host == "db.internal"
        assert config.port == 7000
        assert config.token == "tok"
        assert config.tenant_id == "acme"
        assert config.no_noise is True

    def test_empty_environment(self):
        """No variables yields an empty config."""
        assert ClientConfig.from_env({}).to_dict() == {}

    def test_empty_values_ignored(self):
        """Empty strings are treated as unset."""
        assert ClientConfig.from_env({"EVENTDBX_HOST": "", "EVENTDBX_TOKEN": ""}).host is None

    def test_overrides_win(self):
        """Keyword overrides take precedence over the environment."""
        config = ClientConfig.from_env({"EVENTDBX_TOKEN": "env"}, token="explicit")
        assert config.token == "explicit"

    def test_none_override_keeps_environment(self):
        """A None override does not clear an environment value."""
        config = ClientConfig.from_env({"EVENTDBX_TOKEN": "env"}, token=None)
        assert config.token == "env"

    def test_process_environment(self, monkeypatch):
        """os.environ is used when no mapping is given."""
        monkeypatch.setenv("EVENTDBX_TENANT_ID", "from-process")
        assert ClientConfig.from_env().tenant_id == "from-process"

    def test_bad_port(self):
        """A non-numeric port names the variable."""
        with pytest.raises(ValidationError, match="EVENTDBX_PORT"):
            ClientConfig.from_env({"EVENTDBX_PORT": "http"})

    def test_bad_bool(self):
        """An unrecognised boolean names the variable."""
        with pytest.raises(ValidationError, match="EVENTDBX_NO_NOISE"):
            ClientConfig.from_env({"EVENTDBX_NO_NOISE": "maybe"})

    @pytest.mark.parametrize(("raw", "expected"), [("1", True), ("off", False), ("", False)])
    def test_bool_spellings(self, raw, expected):
        """Common boolean spellings are accepted."""
        assert ClientConfig.from_env({"EVENTDBX_NO_NOISE": raw}).no_noise is expected
