from __future__ import annotations

from typing import Any, Optional


class ChannelTarget:
    """Send snippets to an already open shell channel.

    The channel only needs a `write(str)` method. A trailing newline is
    appended so the remote shell executes the line.
    """

    def __init__(self, channel: Any) -> None:
        self.channel = channel

    def run(self, command: str) -> Any:
        return self.channel.write(command + "\n")


class TerminalTarget:
    """Open a new terminal for `connection` in `directory` running the snippet.

    `opener` is called as ``opener(connection, command, directory=...)``;
    `SSHAdapter.open_terminal` fits.
    """

    def __init__(self, opener: Any, connection: Any, directory: Optional[str] = None) -> None:
        self.opener = opener
        self.connection = connection
        self.directory = directory

    def run(self, command: str) -> Any:
        return self.opener(self.connection, command, directory=self.directory)
