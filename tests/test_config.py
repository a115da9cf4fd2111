from pathlib import Path

from buildrev.config import Settings, load_settings


def test_defaults():
    assert load_settings() == Settings()


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("BUILDREV_REPO_DIR", "/srv/repo")
    monkeypatch.setenv("BUILDREV_LOG_LEVEL", "debug")
    monkeypatch.setenv("BUILDREV_HOST", "0.0.0.0")
    monkeypatch.setenv("BUILDREV_PORT", "9000")
    monkeypatch.setenv("BUILDREV_METADATA_FALLBACK", "Yes")

    s = load_settings()
    assert s.repo_dir == Path("/srv/repo")
    assert s.log_level == "DEBUG"
    assert (s.host, s.port) == ("0.0.0.0", 9000)
    assert s.metadata_fallback is True


def test_invalid_port_keeps_default(monkeypatch):
    monkeypatch.setenv("BUILDREV_PORT", "http")
    assert load_settings().port == 8001
