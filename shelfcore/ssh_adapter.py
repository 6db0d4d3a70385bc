from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from typing import Any, List, Optional


logger = logging.getLogger(__name__)


class _FailedProcess:
    def __init__(self, args: List[str], err: str) -> None:
        self.args = args
        self.returncode = 1
        self.stdout = ""
        self.stderr = err


class SSHAdapter:
    """Thin wrapper around the system `ssh` client used to open terminals.

    `runner` defaults to `subprocess.run` and can be replaced in tests.
    """

    def __init__(self, executable: Optional[str] = None, runner: Optional[Any] = None) -> None:
        self._executable = executable
        self._runner = runner or subprocess.run

    @property
    def executable(self) -> str:
        if self._executable is None:
            self._executable = self._resolve_executable()
        return self._executable

    def build_command(self, connection: Any, command: str, directory: Optional[str] = None) -> List[str]:
        """Return the argv that runs `command` on `connection` inside `directory`."""
        remote = command
        if directory:
            remote = f"cd {shlex.quote(directory)} && {command}"
        argv = [self.executable, "-t"]
        port = getattr(connection, "port", 22)
        if port and port != 22:
            argv += ["-p", str(port)]
        argv += [connection.owner, remote]
        return argv

    def open_terminal(self, connection: Any, command: str, directory: Optional[str] = None) -> Any:
        argv = self.build_command(connection, command, directory=directory)
        logger.info("Opening terminal on %s", connection.owner)
        try:
            return self._runner(argv)
        except OSError as exc:
            logger.error("Could not start ssh for %s: %s", connection.owner, exc)
            return _FailedProcess(argv, str(exc))

    def _resolve_executable(self) -> str:
        env_override = os.environ.get("SNIPPETSHELF_SSH")
        if env_override:
            return env_override
        for name in ("ssh", "ssh.exe"):
            path = shutil.which(name)
            if path:
                return path
        return "ssh"
