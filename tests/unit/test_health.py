"""Tests for health check endpoints."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from s3_bucket_planner.health import create_combined_wsgi_app, health_check_app, start_metrics_server


def _environ(path):
    return {
        "REQUEST_METHOD": "GET",
        "PATH_INFO": path,
        "SCRIPT_NAME": "",
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8080",
        "wsgi.url_scheme": "http",
    }


class TestHealthCheckApp:
    """Test cases for health_check_app WSGI application."""

    def test_healthz(self):
        """Test /healthz endpoint."""
        start_response = MagicMock()

        body = b"".join(health_check_app(_environ("/healthz"), start_response))

        assert b'"status":"ok"' in body
        assert "200" in start_response.call_args[0][0]

    def test_readyz(self):
        """Test /readyz endpoint."""
        start_response = MagicMock()

        body = b"".join(health_check_app(_environ("/readyz"), start_response))

        assert b'"status":"ready"' in body
        assert "200" in start_response.call_args[0][0]

    def test_unknown_path(self):
        """Test that other paths return 404."""
        start_response = MagicMock()

        body = b"".join(health_check_app(_environ("/nope"), start_response))

        assert b'"error":"not found"' in body
        assert "404" in start_response.call_args[0][0]


class TestCombinedWsgiApp:
    """Test cases for the combined metrics and health app."""

    def test_routes_health_paths(self):
        """Test that health paths are served by the health app."""
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        body = b"".join(app(_environ("/healthz"), start_response))

        assert b'"status":"ok"' in body

    @patch("s3_bucket_planner.health.make_wsgi_app")
    def test_delegates_metrics(self, mock_make_wsgi_app):
        """Test that other paths are delegated to the prometheus app."""
        metrics_app = MagicMock(return_value=[b"metrics"])
        mock_make_wsgi_app.return_value = metrics_app
        app = create_combined_wsgi_app()
        environ = _environ("/metrics")
        start_response = MagicMock()

        result = app(environ, start_response)

        assert result == [b"metrics"]
        metrics_app.assert_called_once_with(environ, start_response)


class TestStartMetricsServer:
    """Test cases for start_metrics_server."""

    @patch("s3_bucket_planner.health.make_server")
    def test_starts_daemon_thread(self, mock_make_server):
        """Test that the server runs in a daemon thread."""
        server = MagicMock()
        mock_make_server.return_value = server

        thread = start_metrics_server(9090)
        thread.join(timeout=1)

        assert mock_make_server.call_args[0][:2] == ("", 9090)
        assert thread.daemon is True
        server.serve_forever.assert_called_once()
