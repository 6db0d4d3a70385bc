from __future__ import annotations


class SnippetError(Exception):
    """Base class for snippet storage errors."""


class SnippetDecodeError(SnippetError):
    """Persisted bytes could not be turned back into snippets."""


class SnippetEncodeError(SnippetError):
    """Snippets could not be serialized for storage."""


class DuplicateSnippetError(SnippetError):
    def __init__(self, snippet) -> None:
        super().__init__(f"Snippet already exists for {snippet.owner}: {snippet.display_title}")
        self.snippet = snippet


class SnippetNotFoundError(SnippetError):
    def __init__(self, snippet) -> None:
        super().__init__(f"Snippet not found for {snippet.owner}: {snippet.display_title}")
        self.snippet = snippet
