import sys

import pytest

from upm_git.adapters.errors import CommandNotFound, CommandTimeout, VcsError
from upm_git.adapters.runner.subprocess_runner import SubprocessCommandRunner
from upm_git.adapters.vcs.git_cli import GitCliDriver


def test_run_captures_output_and_exit_code(tmp_path):
    result = SubprocessCommandRunner().run(
        [sys.executable, "-c", "import sys; print('out'); sys.exit(4)"], cwd=tmp_path
    )
    assert result.exit_code == 4
    assert result.stdout.strip() == "out"
    assert not result.succeeded


def test_missing_executable_raises_command_not_found(tmp_path):
    with pytest.raises(CommandNotFound):
        SubprocessCommandRunner().run(["definitely-not-a-real-binary-upm"], cwd=tmp_path)


def test_timeout_raises_command_timeout(tmp_path):
    with pytest.raises(CommandTimeout):
        SubprocessCommandRunner(timeout=0.2).run([sys.executable, "-c", "import time; time.sleep(5)"])


def test_git_driver_reports_missing_git_as_vcs_error(tmp_path):
    driver = GitCliDriver(executable="definitely-not-git-upm")
    with pytest.raises(VcsError) as exc:
        driver.list_tags(tmp_path)
    assert isinstance(exc.value.cause, CommandNotFound)
