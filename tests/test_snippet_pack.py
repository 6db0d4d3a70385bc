import json
import tempfile

from pathlib import Path

import yaml

from shelfcore.key_value_store import FileKeyValueStore
from shelfcore.models import Snippet
from shelfcore.snippet_service import SnippetService
from shelfcore.snippet_store import SnippetStore


def _service(root: Path) -> SnippetService:
    return SnippetService(SnippetStore(FileKeyValueStore(root / "data")))


def test_import_and_export_json_pack():
    with tempfile.TemporaryDirectory() as td:
        tmp_path = Path(td)
        pack = [
            {"title": "Disk", "content": "df -h", "connection": "a@b"},
            {"content": "uptime", "connection": "a@b"},
            {"title": "No command", "content": "", "connection": "a@b"},
            {"title": "Elsewhere", "content": "ls", "connection": "c@d"},
        ]
        pack_path = tmp_path / "pack.json"
        pack_path.write_text(json.dumps(pack), encoding="utf-8")

        service = _service(tmp_path)
        result = service.import_pack(str(pack_path))
        assert result["status"] == "success"
        assert result["imported"] == 3
        assert service.visible_snippets("a@b") == [Snippet("Disk", "df -h", "a@b"), Snippet("", "uptime", "a@b")]
        assert service.visible_snippets("c@d") == [Snippet("Elsewhere", "ls", "c@d")]

        # importing again only finds duplicates
        again = service.import_pack(str(pack_path))
        assert again["imported"] == 0
        assert again["skipped"] == 3

        export_path = tmp_path / "export.json"
        export_result = service.export_pack("a@b", str(export_path))
        assert export_result["status"] == "success"
        exported = json.loads(export_path.read_text(encoding="utf-8"))
        assert [e["content"] for e in exported] == ["df -h", "uptime"]
        assert all(e["connection"] == "a@b" for e in exported)


def test_import_yaml_pack_with_owner_override():
    with tempfile.TemporaryDirectory() as td:
        tmp_path = Path(td)
        pack_path = tmp_path / "pack.yml"
        pack_path.write_text(
            """snippets:
  - title: Logs
    content: journalctl -f
  - content: htop
    connection: someone@else
""",
            encoding="utf-8",
        )
        service = _service(tmp_path)
        result = service.import_pack(str(pack_path), owner="me@box")
        assert result["status"] == "success"
        assert [s.content for s in service.visible_snippets("me@box")] == ["journalctl -f", "htop"]
        assert service.visible_snippets("someone@else") == []

        export_path = tmp_path / "out.yaml"
        assert service.export_pack("me@box", str(export_path))["status"] == "success"
        exported = yaml.safe_load(export_path.read_text(encoding="utf-8"))
        assert exported[0] == {"title": "Logs", "content": "journalctl -f", "connection": "me@box"}


def test_import_reports_bad_packs():
    with tempfile.TemporaryDirectory() as td:
        tmp_path = Path(td)
        service = _service(tmp_path)
        assert service.import_pack(str(tmp_path / "missing.json"))["detail"] == "File not found"

        broken = tmp_path / "broken.json"
        broken.write_text("{not json", encoding="utf-8")
        assert service.import_pack(str(broken))["status"] == "error"

        scalar = tmp_path / "scalar.json"
        scalar.write_text("42", encoding="utf-8")
        assert service.import_pack(str(scalar))["detail"] == "Invalid pack format"


def test_bad_yaml_records_are_skipped_one_by_one():
    with tempfile.TemporaryDirectory() as td:
        tmp_path = Path(td)
        pack_path = tmp_path / "pack.yaml"
        pack_path.write_text(
            """- title: 2024
  content: ls
  connection: a@b
- title: ok
  content: pwd
  connection: a@b
- title: no connection
  content: whoami
""",
            encoding="utf-8",
        )
        service = _service(tmp_path)
        result = service.import_pack(str(pack_path))
        assert result["status"] == "success"
        assert result["imported"] == 1
        assert result["invalid"] == 2
        assert service.visible_snippets("a@b") == [Snippet("ok", "pwd", "a@b")]


def test_import_reports_unsaved_snippets():
    class ReadOnlyStorage:
        def get(self, key):
            return None

        def set(self, key, data):
            raise OSError("read-only file system")

    with tempfile.TemporaryDirectory() as td:
        pack_path = Path(td) / "pack.json"
        pack_path.write_text(json.dumps([{"content": "ls", "connection": "a@b"}]), encoding="utf-8")
        service = SnippetService(SnippetStore(ReadOnlyStorage()))
        result = service.import_pack(str(pack_path))
        assert result["status"] == "error"
        assert result["failed"] == 1
        assert result["imported"] == 0
