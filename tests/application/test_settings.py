import pytest

from upm_git.application import settings


def test_defaults(monkeypatch):
    monkeypatch.delenv(settings.EXECUTABLE_ENV, raising=False)
    monkeypatch.delenv(settings.TIMEOUT_ENV, raising=False)
    assert settings.git_executable() == "git"
    assert settings.command_timeout() is None


def test_overrides(monkeypatch):
    monkeypatch.setenv(settings.EXECUTABLE_ENV, "/opt/git/bin/git")
    monkeypatch.setenv(settings.TIMEOUT_ENV, "45")
    assert settings.git_executable() == "/opt/git/bin/git"
    assert settings.command_timeout() == 45.0


def test_non_positive_timeout_disables_limit(monkeypatch):
    monkeypatch.setenv(settings.TIMEOUT_ENV, "0")
    assert settings.command_timeout() is None


def test_invalid_timeout(monkeypatch):
    monkeypatch.setenv(settings.TIMEOUT_ENV, "soon")
    with pytest.raises(ValueError, match="UPM_GIT_TIMEOUT"):
        settings.command_timeout()
