"""Tests for the application wiring and settings."""

import pytest
from fastapi.testclient import TestClient

from app.config import DEFAULT_PORT, DEFAULT_STATIC_DIR, Settings
from app.main import create_app
from app.market.factory import create_market_feed


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(tick_interval=60.0, static_dir=tmp_path / "missing")


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        """Test defaults when nothing is set."""
        settings = Settings.from_env()
        assert settings.port == DEFAULT_PORT == 3000
        assert settings.host == "0.0.0.0"
        assert settings.tick_interval == 1.0
        assert settings.simulator_seed is None
        assert settings.log_level == "INFO"
        assert settings.static_dir == DEFAULT_STATIC_DIR

    def test_reads_environment(self, monkeypatch, tmp_path):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("TICK_INTERVAL", "0.5")
        monkeypatch.setenv("SIMULATOR_SEED", "42")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("STATIC_DIR", str(tmp_path))
        settings = Settings.from_env()
        assert settings.port == 8080
        assert settings.host == "127.0.0.1"
        assert settings.tick_interval == 0.5
        assert settings.simulator_seed == 42
        assert settings.log_level == "DEBUG"
        assert settings.static_dir == tmp_path

    def test_blank_port_falls_back(self, monkeypatch):
        """Test that a whitespace PORT uses the default."""
        monkeypatch.setenv("PORT", "   ")
        assert Settings.from_env().port == DEFAULT_PORT

    def test_invalid_port(self, monkeypatch):
        """Test that a non-numeric PORT names the variable."""
        monkeypatch.setenv("PORT", "http")
        with pytest.raises(ValueError, match="PORT"):
            Settings.from_env()

    def test_invalid_tick_interval(self, monkeypatch):
        """Test that a non-positive TICK_INTERVAL is rejected."""
        monkeypatch.setenv("TICK_INTERVAL", "0")
        with pytest.raises(ValueError, match="TICK_INTERVAL"):
            Settings.from_env()


class TestApp:
    """Tests for create_app."""

    def test_liveness(self, settings):
        """Test the root liveness route."""
        with TestClient(create_app(settings)) as client:
            response = client.get("/")
        assert response.status_code == 200
        assert response.text == "Stock Dashboard backend is running"

    def test_health_counts_sessions(self, settings):
        """Test that /api/health reports connected sessions."""
        with TestClient(create_app(settings)) as client:
            assert client.get("/api/health").json() == {"status": "ok", "sessions": 0}
            with client.websocket_connect("/ws") as ws:
                ws.send_json({"event": "login", "data": "a@example.com"})
                ws.receive_json()
                assert client.get("/api/health").json()["sessions"] == 1

    def test_lifespan_runs_engine(self, settings):
        """The broadcast engine runs only while the app is up."""
        feed = create_market_feed(tick_interval=60.0)
        with TestClient(create_app(settings, feed=feed)) as client:
            assert client.app.state.feed is feed
            assert feed.engine.running
        assert not feed.engine.running

    def test_serves_static_client(self, tmp_path):
        """Test that files in the static directory are served."""
        (tmp_path / "index.html").write_text("<h1>dashboard</h1>")
        settings = Settings(tick_interval=60.0, static_dir=tmp_path)
        with TestClient(create_app(settings)) as client:
            assert client.get("/index.html").text == "<h1>dashboard</h1>"
            assert client.get("/").text == "Stock Dashboard backend is running"

    def test_missing_static_dir(self, settings):
        """A missing static directory disables the UI without failing."""
        with TestClient(create_app(settings)) as client:
            assert client.get("/index.html").status_code == 404

    def test_bundled_client_exists(self):
        """The default static directory ships an index page."""
        assert (DEFAULT_STATIC_DIR / "index.html").is_file()
