from pathlib import Path
import os
import subprocess

from upm_git.adapters.errors import CommandNotFound, CommandTimeout
from upm_git.domain.json_types import as_json_dict
from upm_git.ports.command_runner import CommandResult


class SubprocessCommandRunner:
    """Runs commands to completion and captures their output.

    A non-zero exit status is returned, not raised; callers decide what a
    failure means for them.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(self, args: list[str], cwd: Path | None = None) -> CommandResult:
        kwargs: dict[str, object] = {}
        if os.name == "nt":
            kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW
        env = dict(os.environ)
        env.setdefault("GIT_TERMINAL_PROMPT", "0")
        try:
            proc = subprocess.run(
                args,
                cwd=str(cwd) if cwd is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
                env=env,
                **kwargs,  # type: ignore[arg-type]
            )
        except FileNotFoundError as e:
            raise CommandNotFound(
                f"Executable not found: {args[0]}",
                details=as_json_dict({"command": args}),
                hint="Install git or point UPM_GIT_EXECUTABLE at it",
                cause=e,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandTimeout(
                f"Command timed out after {self.timeout}s: {' '.join(args)}",
                details=as_json_dict({"command": args, "timeout": self.timeout}),
                cause=e,
            )
        return CommandResult(exit_code=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)
