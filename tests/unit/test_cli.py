"""
Unit tests for the command-line entry point.
"""

import socket

import pytest

from rawhttp.__main__ import build_parser, config_from_args, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_WORKERS", "HTTP_TIMEOUT",
                 "HTTP_DOCUMENT_ROOT", "HTTP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestConfigFromArgs:

    def test_defaults(self):
        config = config_from_args(build_parser().parse_args([]))

        assert config.port == 8080
        assert config.document_root == "public"
        assert config.contain_paths is False

    def test_flags(self):
        args = build_parser().parse_args([
            "--host", "0.0.0.0", "--port", "3000", "--root", "site",
            "--timeout", "2", "--workers", "3", "--contain", "--log-level", "DEBUG",
        ])
        config = config_from_args(args)

        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.document_root == "site"
        assert config.timeout == 2.0
        assert (config.min_workers, config.max_workers) == (3, 12)
        assert config.contain_paths is True
        assert config.log_level == "DEBUG"

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "9000")
        monkeypatch.setenv("HTTP_DOCUMENT_ROOT", "from-env")

        config = config_from_args(build_parser().parse_args(["--port", "9001"]))

        assert config.port == 9001
        assert config.document_root == "from-env"

    def test_workers_env_and_flag_agree(self, monkeypatch):
        from_flag = config_from_args(build_parser().parse_args(["--workers", "2"]))
        monkeypatch.setenv("HTTP_WORKERS", "2")
        from_env = config_from_args(build_parser().parse_args([]))

        assert (from_env.min_workers, from_env.max_workers) == (2, 8)
        assert (from_flag.min_workers, from_flag.max_workers) == (2, 8)

    def test_short_flags(self):
        args = build_parser().parse_args(["-p", "81", "-r", "www", "-w", "2"])
        config = config_from_args(args)

        assert (config.port, config.document_root, config.min_workers) == (81, "www", 2)


class TestMain:

    def test_invalid_port_exits_1(self, capsys):
        assert main(["--port", "70000"]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_invalid_timeout_exits_1(self):
        assert main(["--timeout", "0"]) == 1

    def test_bind_failure_exits_1(self, document_root, capsys):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
            busy.bind(("127.0.0.1", 0))
            busy.listen(1)
            port = busy.getsockname()[1]

            status = main(["--port", str(port), "--root", str(document_root), "-l", "ERROR"])

        captured = capsys.readouterr()
        assert status == 1
        assert "Failed to bind" in captured.err
        assert f":{port}" not in captured.out  # Banner only after listen()

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "rawhttp" in capsys.readouterr().out
