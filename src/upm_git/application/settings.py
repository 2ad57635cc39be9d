import os

EXECUTABLE_ENV = "UPM_GIT_EXECUTABLE"
TIMEOUT_ENV = "UPM_GIT_TIMEOUT"


def git_executable() -> str:
    return os.getenv(EXECUTABLE_ENV) or "git"


def command_timeout() -> float | None:
    raw = os.getenv(TIMEOUT_ENV)
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{TIMEOUT_ENV} must be a number of seconds, got {raw!r}")
    return value if value > 0 else None
