"""Tests for the command-line interface."""

from unittest.mock import patch

import pytest

from beamscan.cli import main


class TestMain:
    """Tests for main()."""

    def test_runs_uvicorn_with_arguments(self) -> None:
        """Host, port and reload are passed through to uvicorn."""
        with patch("beamscan.cli.uvicorn.run") as run, patch("beamscan.cli.configure_logging") as configure:
            code = main(["--host", "0.0.0.0", "--port", "9000", "--reload"])

        assert code == 0
        configure.assert_called_once_with()
        run.assert_called_once_with(
            "beamscan.server.app:app",
            host="0.0.0.0",
            port=9000,
            reload=True,
        )

    def test_defaults(self) -> None:
        with patch("beamscan.cli.uvicorn.run") as run, patch("beamscan.cli.configure_logging"):
            main([])

        kwargs = run.call_args.kwargs
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8000
        assert kwargs["reload"] is False

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out
