from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional, Sequence

from shelfcore.errors import (
    DuplicateSnippetError,
    SnippetDecodeError,
    SnippetEncodeError,
    SnippetNotFoundError,
)
from shelfcore.models import Snippet
from shelfcore.snippet_codec import JsonSnippetCodec


logger = logging.getLogger(__name__)


class SnippetStore:
    """Ordered snippet collection for every connection, persisted as one blob.

    `storage` needs `get(key) -> Optional[bytes]` and `set(key, data)`; `codec`
    needs `encode(snippets) -> bytes` and `decode(data) -> list`. Both are
    injected so tests can hand in fakes. Reads degrade to an empty list and
    failed writes are skipped, so storage problems never reach callers.
    """

    DEFAULT_KEY = "snippets"

    def __init__(self, storage: Any, codec: Optional[Any] = None, key: str = DEFAULT_KEY) -> None:
        self._storage = storage
        self._codec = codec or JsonSnippetCodec()
        self._key = key
        self._lock = threading.RLock()

    @property
    def key(self) -> str:
        return self._key

    # -------------------------
    # Whole-collection access
    # -------------------------
    def load_all(self) -> List[Snippet]:
        try:
            data = self._storage.get(self._key)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read snippets from '%s': %s", self._key, exc)
            return []
        if not data:
            return []
        try:
            return list(self._codec.decode(data))
        except SnippetDecodeError as exc:
            logger.warning("Ignoring unreadable snippets in '%s': %s", self._key, exc)
            return []

    def save_all(self, snippets: Sequence[Snippet]) -> bool:
        try:
            data = self._codec.encode(list(snippets))
        except SnippetEncodeError as exc:
            logger.error("Could not encode %d snippets: %s", len(snippets), exc)
            return False
        try:
            self._storage.set(self._key, data)
        except (OSError, ValueError) as exc:
            logger.error("Could not write snippets to '%s': %s", self._key, exc)
            return False
        logger.debug("Saved %d snippets to '%s'", len(snippets), self._key)
        return True

    # -------------------------
    # Scoped reads
    # -------------------------
    def list_for_owner(self, owner: str) -> List[Snippet]:
        return [s for s in self.load_all() if s.owner == owner]

    def search(self, owner: str, query: str) -> List[Snippet]:
        q = (query or "").lower()
        return [s for s in self.list_for_owner(owner) if q in s.title.lower() or q in s.content.lower()]

    def owners(self) -> List[str]:
        seen: List[str] = []
        for snippet in self.load_all():
            if snippet.owner not in seen:
                seen.append(snippet.owner)
        return seen

    # -------------------------
    # Mutations
    # -------------------------
    def add(self, snippet: Snippet) -> bool:
        """Append `snippet` to the end of the collection and persist it."""
        with self._lock:
            snippets = self.load_all()
            if snippet in snippets:
                raise DuplicateSnippetError(snippet)
            snippets.append(snippet)
            return self.save_all(snippets)

    def remove(self, snippet: Snippet) -> bool:
        with self._lock:
            snippets = self.load_all()
            try:
                snippets.remove(snippet)
            except ValueError:
                raise SnippetNotFoundError(snippet) from None
            return self.save_all(snippets)

    def move(self, snippet: Snippet, to_index: int) -> bool:
        """Move `snippet` to `to_index` within its owner's scoped view.

        Out of range indexes are clamped. Only the slots held by the owner's
        snippets are rewritten, so other owners keep their positions.
        """
        with self._lock:
            snippets = self.load_all()
            slots = [i for i, s in enumerate(snippets) if s.owner == snippet.owner]
            scoped = [snippets[i] for i in slots]
            if snippet not in scoped:
                raise SnippetNotFoundError(snippet)
            scoped.remove(snippet)
            target = max(0, min(to_index, len(scoped)))
            scoped.insert(target, snippet)
            for slot, item in zip(slots, scoped):
                snippets[slot] = item
            return self.save_all(snippets)
