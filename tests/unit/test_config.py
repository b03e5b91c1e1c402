"""
Unit tests for ServerConfig.
"""

import pytest

from rawhttp import ServerConfig


class TestDefaults:

    def test_defaults(self):
        config = ServerConfig()

        assert (config.host, config.port) == ("127.0.0.1", 8080)
        assert config.document_root == "public"
        assert config.index_file == "index.html"
        assert config.buffer_size == 1024
        assert config.timeout == 30.0
        assert config.contain_paths is False

    def test_defaults_are_valid(self):
        ServerConfig().validate()


class TestValidate:
    """Tests for validate()."""

    @pytest.mark.parametrize("overrides, message", [
        ({"port": -1}, "Invalid port"),
        ({"port": 65536}, "Invalid port"),
        ({"buffer_size": 0}, "buffer_size"),
        ({"min_workers": 0}, "min_workers"),
        ({"min_workers": 8, "max_workers": 4}, "max_workers"),
        ({"queue_size": 0}, "queue_size"),
        ({"timeout": 0}, "timeout"),
        ({"timeout": -2.5}, "timeout"),
        ({"index_file": ""}, "index_file"),
        ({"index_file": "a/b.html"}, "index_file"),
    ])
    def test_invalid(self, overrides, message):
        with pytest.raises(ValueError, match=message):
            ServerConfig(**overrides).validate()

    def test_port_zero_is_valid(self):
        ServerConfig(port=0).validate()

    def test_no_timeout_is_valid(self):
        ServerConfig(timeout=None).validate()


class TestFromEnv:
    """Tests for from_env()."""

    def test_without_environment(self, monkeypatch):
        for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_WORKERS", "HTTP_TIMEOUT",
                     "HTTP_DOCUMENT_ROOT", "HTTP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("HTTP_HOST", "0.0.0.0")
        monkeypatch.setenv("HTTP_PORT", "3000")
        monkeypatch.setenv("HTTP_WORKERS", "8")
        monkeypatch.setenv("HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("HTTP_DOCUMENT_ROOT", "/srv/www")
        monkeypatch.setenv("HTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert (config.min_workers, config.max_workers) == (8, 32)
        assert config.timeout == 2.5
        assert config.document_root == "/srv/www"
        assert config.log_level == "DEBUG"

    def test_bad_number(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "eighty")

        with pytest.raises(ValueError):
            ServerConfig.from_env()

    def test_small_worker_count_is_valid(self, monkeypatch):
        monkeypatch.setenv("HTTP_WORKERS", "2")

        config = ServerConfig.from_env()
        config.validate()

        assert (config.min_workers, config.max_workers) == (2, 8)


class TestSetWorkers:

    def test_scales_max(self):
        config = ServerConfig()
        config.set_workers(3)

        assert (config.min_workers, config.max_workers) == (3, 12)

    def test_zero_is_invalid(self):
        config = ServerConfig()
        config.set_workers(0)

        with pytest.raises(ValueError, match="min_workers"):
            config.validate()
