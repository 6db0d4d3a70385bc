from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from shelfcore.errors import DuplicateSnippetError, SnippetError, SnippetNotFoundError
from shelfcore.models import Snippet
from shelfcore.snippet_codec import codec_for_path, records_to_snippets


logger = logging.getLogger(__name__)


def _is_blank(query: Optional[str]) -> bool:
    return not (query or "").strip()


class SnippetService:
    """UI-facing wrapper around `SnippetStore`.

    Applies the list display policy and reports mutations as
    ``{"status": ..., "detail": ...}`` dicts instead of raising.
    """

    def __init__(self, snippet_store: Any):
        self._store = snippet_store

    def visible_snippets(self, owner: str, query: Optional[str] = None) -> List[Snippet]:
        if _is_blank(query):
            return self._store.list_for_owner(owner)
        return self._store.search(owner, query)

    def can_reorder(self, query: Optional[str] = None) -> bool:
        # Positions in a filtered list do not map onto the stored order
        return _is_blank(query)

    def list_owners(self) -> List[str]:
        return self._store.owners()

    def create_snippet(self, title: Optional[str], content: Optional[str], owner: str) -> Dict[str, Any]:
        if not content:
            return {"status": "error", "detail": "Snippet content cannot be empty"}
        snippet = Snippet(title=title or "", content=content, owner=owner)
        try:
            saved = self._store.add(snippet)
        except DuplicateSnippetError:
            return {"status": "error", "detail": "Snippet already exists"}
        if not saved:
            return {"status": "error", "detail": "Snippet could not be saved"}
        return {"status": "success", "detail": f"Created snippet {snippet.display_title}", "snippet": snippet.to_record()}

    def delete_snippet(self, snippet: Snippet) -> Dict[str, Any]:
        try:
            saved = self._store.remove(snippet)
        except SnippetNotFoundError:
            return {"status": "error", "detail": "Snippet not found"}
        if not saved:
            return {"status": "error", "detail": "Snippet could not be saved"}
        return {"status": "success", "detail": f"Deleted {snippet.display_title}"}

    def move_snippet(self, snippet: Snippet, to_index: int) -> Dict[str, Any]:
        try:
            saved = self._store.move(snippet, to_index)
        except SnippetNotFoundError:
            return {"status": "error", "detail": "Snippet not found"}
        if not saved:
            return {"status": "error", "detail": "Snippet order could not be saved"}
        return {"status": "success", "detail": f"Moved {snippet.display_title}"}

    def run_snippet(self, snippet: Snippet, target: Any) -> Dict[str, Any]:
        """Hand the snippet's command to an execution target."""
        try:
            result = target.run(snippet.content)
        except Exception as exc:
            logger.error("Running snippet %r failed: %s", snippet.display_title, exc)
            return {"status": "error", "detail": str(exc)}
        returncode = getattr(result, "returncode", 0)
        if returncode:
            detail = (getattr(result, "stderr", "") or "").strip() or f"Exited with status {returncode}"
            return {"status": "error", "detail": detail, "returncode": returncode}
        return {"status": "success", "detail": f"Ran {snippet.display_title}"}

    # -------------------------
    # Snippet packs
    # -------------------------
    def import_pack(self, file_path: str, owner: Optional[str] = None) -> Dict[str, Any]:
        """Import snippets from a JSON or YAML pack.

        A pack is a list of records or a mapping with a `snippets` list.
        Bad records (no content, no connection, non-string fields) are
        skipped one by one and counted as invalid. `owner` replaces each
        record's connection when given.
        """
        path = Path(file_path)
        if not path.exists():
            return {"status": "error", "detail": "File not found"}
        try:
            text = path.read_text(encoding="utf-8")
            if path.suffix.lower() in {".yml", ".yaml"}:
                pack = yaml.safe_load(text)
            else:
                pack = json.loads(text)
        except (OSError, ValueError, RecursionError, yaml.YAMLError) as exc:
            return {"status": "error", "detail": f"Invalid pack format: {exc}"}

        if isinstance(pack, dict):
            pack = pack.get("snippets", [])
        if not isinstance(pack, list):
            return {"status": "error", "detail": "Invalid pack format"}

        imported = 0
        skipped = 0
        invalid = 0
        failed = 0
        for raw in pack:
            if not isinstance(raw, dict) or not raw.get("content"):
                invalid += 1
                continue
            record = {
                "title": raw.get("title") or "",
                "content": raw.get("content"),
                "connection": owner or raw.get("connection") or "",
            }
            try:
                snippet = records_to_snippets([record])[0]
            except SnippetError:
                invalid += 1
                continue
            if not snippet.owner:
                invalid += 1
                continue
            try:
                if self._store.add(snippet):
                    imported += 1
                else:
                    failed += 1
            except DuplicateSnippetError:
                skipped += 1

        counts = {"imported": imported, "skipped": skipped, "invalid": invalid, "failed": failed}
        logger.info(
            "Imported %d snippets from %s (%d duplicates, %d invalid, %d not saved)",
            imported, path, skipped, invalid, failed,
        )
        if failed:
            return {"status": "error", "detail": f"{failed} snippets could not be saved", **counts}
        return {"status": "success", "detail": f"Imported {imported} snippets", **counts}

    def export_pack(self, owner: str, file_path: str) -> Dict[str, Any]:
        """Export the owner's snippets, in order, to a JSON or YAML pack."""
        snippets = self._store.list_for_owner(owner)
        try:
            data = codec_for_path(Path(file_path)).encode(snippets)
            Path(file_path).write_bytes(data)
        except (OSError, SnippetError) as exc:
            return {"status": "error", "detail": str(exc)}
        return {"status": "success", "detail": f"Exported {len(snippets)} snippets", "path": str(file_path)}
