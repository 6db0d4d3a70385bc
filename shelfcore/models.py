from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


def format_owner(username: str, host: str) -> str:
    return f"{username}@{host}"


@dataclass(frozen=True)
class Snippet:
    """A reusable command scoped to one remote connection.

    `owner` is the ``username@host`` string of the connection. It is stored
    under the ``connection`` key in serialized records.
    """

    title: str
    content: str
    owner: str

    @property
    def display_title(self) -> str:
        return self.title or self.content

    @property
    def subtitle(self) -> str:
        # Content is only repeated under a real title
        return self.content if self.title else ""

    def to_record(self) -> Dict[str, str]:
        return {"title": self.title, "content": self.content, "connection": self.owner}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Snippet":
        return cls(title=record["title"], content=record["content"], owner=record["connection"])


@dataclass(frozen=True)
class RemoteConnection:
    username: str
    host: str
    port: int = 22

    @property
    def owner(self) -> str:
        return format_owner(self.username, self.host)

    @classmethod
    def parse(cls, owner: str, port: int = 22) -> "RemoteConnection":
        """Build a connection from a ``username@host`` string."""
        username, sep, host = owner.rpartition("@")
        if not sep or not username or not host:
            raise ValueError(f"Expected username@host, got {owner!r}")
        return cls(username=username, host=host, port=port)
