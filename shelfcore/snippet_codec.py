from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

import yaml

from shelfcore.errors import SnippetDecodeError, SnippetEncodeError
from shelfcore.models import Snippet


_FIELDS = ("title", "content", "connection")


def records_to_snippets(records: Any) -> List[Snippet]:
    """Validate decoded records and build snippets from them."""
    if not isinstance(records, list):
        raise SnippetDecodeError(f"Expected a list of snippets, got {type(records).__name__}")
    snippets: List[Snippet] = []
    for position, record in enumerate(records):
        if not isinstance(record, dict):
            raise SnippetDecodeError(f"Snippet #{position} is not a mapping")
        for field in _FIELDS:
            if not isinstance(record.get(field), str):
                raise SnippetDecodeError(f"Snippet #{position} has no string '{field}' field")
        snippets.append(Snippet.from_record(record))
    return snippets


class JsonSnippetCodec:
    name = "json"

    def encode(self, snippets: Sequence[Snippet]) -> bytes:
        try:
            return json.dumps([s.to_record() for s in snippets], ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SnippetEncodeError(str(exc)) from exc

    def decode(self, data: bytes) -> List[Snippet]:
        try:
            records = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, RecursionError) as exc:
            raise SnippetDecodeError(str(exc)) from exc
        return records_to_snippets(records)


class YamlSnippetCodec:
    name = "yaml"

    def encode(self, snippets: Sequence[Snippet]) -> bytes:
        records: List[Dict[str, str]] = [s.to_record() for s in snippets]
        try:
            text = yaml.safe_dump(records, sort_keys=False, allow_unicode=True)
        except yaml.YAMLError as exc:
            raise SnippetEncodeError(str(exc)) from exc
        return text.encode("utf-8")

    def decode(self, data: bytes) -> List[Snippet]:
        try:
            records = yaml.safe_load(data.decode("utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError, RecursionError) as exc:
            raise SnippetDecodeError(str(exc)) from exc
        if records is None:
            return []
        return records_to_snippets(records)


_CODECS = {
    JsonSnippetCodec.name: JsonSnippetCodec,
    YamlSnippetCodec.name: YamlSnippetCodec,
}
CODEC_NAMES = tuple(_CODECS)


def get_codec(name: str):
    try:
        return _CODECS[(name or "").lower()]()
    except KeyError:
        raise ValueError(f"Unknown snippet codec: {name!r}") from None


def codec_for_path(path: Path):
    """Pick a codec from a pack file's suffix; anything but YAML is JSON."""
    if Path(path).suffix.lower() in {".yml", ".yaml"}:
        return YamlSnippetCodec()
    return JsonSnippetCodec()
