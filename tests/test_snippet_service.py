from shelfcore.execution import ChannelTarget, TerminalTarget
from shelfcore.models import RemoteConnection, Snippet
from shelfcore.snippet_service import SnippetService
from shelfcore.snippet_store import SnippetStore


class MemoryStorage:
    def __init__(self):
        self.slots = {}

    def get(self, key):
        return self.slots.get(key)

    def set(self, key, data):
        self.slots[key] = data


class DummyChannel:
    def __init__(self):
        self.written = []

    def write(self, text):
        self.written.append(text)


class BrokenChannel:
    def write(self, text):
        raise RuntimeError("channel closed")


class DummyOpener:
    def __init__(self, returncode=0, stderr=""):
        self.calls = []
        self.returncode = returncode
        self.stderr = stderr

    def __call__(self, connection, command, directory=None):
        self.calls.append((connection, command, directory))

        class _Result:
            pass

        result = _Result()
        result.returncode = self.returncode
        result.stderr = self.stderr
        return result


def _service():
    return SnippetService(SnippetStore(MemoryStorage()))


def test_create_snippet_validates_and_rejects_duplicates():
    service = _service()
    res = service.create_snippet("List", "ls -la", "a@b")
    assert res["status"] == "success"
    assert res["snippet"] == {"title": "List", "content": "ls -la", "connection": "a@b"}

    again = service.create_snippet("List", "ls -la", "a@b")
    assert again["status"] == "error"
    assert again["detail"] == "Snippet already exists"

    empty = service.create_snippet("Nothing", "", "a@b")
    assert empty["status"] == "error"
    assert "empty" in empty["detail"]

    untitled = service.create_snippet(None, "pwd", "a@b")
    assert untitled["status"] == "success"
    assert service.visible_snippets("a@b") == [Snippet("List", "ls -la", "a@b"), Snippet("", "pwd", "a@b")]


def test_blank_query_shows_whole_scoped_list():
    service = _service()
    service.create_snippet("List", "ls -la", "a@b")
    service.create_snippet("", "pwd", "a@b")
    service.create_snippet("", "ls /", "c@d")

    assert len(service.visible_snippets("a@b")) == 2
    assert len(service.visible_snippets("a@b", "")) == 2
    assert len(service.visible_snippets("a@b", "   ")) == 2
    assert service.visible_snippets("a@b", "LS") == [Snippet("List", "ls -la", "a@b")]


def test_reordering_only_without_query():
    service = _service()
    assert service.can_reorder(None)
    assert service.can_reorder("")
    assert not service.can_reorder("ls")


def test_delete_and_move_report_missing_snippets():
    service = _service()
    service.create_snippet("", "one", "a@b")
    service.create_snippet("", "two", "a@b")
    one = Snippet("", "one", "a@b")
    two = Snippet("", "two", "a@b")

    assert service.move_snippet(two, 0)["status"] == "success"
    assert service.visible_snippets("a@b") == [two, one]

    assert service.delete_snippet(one)["status"] == "success"
    assert service.delete_snippet(one)["detail"] == "Snippet not found"
    assert service.move_snippet(one, 0)["detail"] == "Snippet not found"


def test_run_snippet_on_channel_appends_newline():
    service = _service()
    channel = DummyChannel()
    res = service.run_snippet(Snippet("", "uptime", "a@b"), ChannelTarget(channel))
    assert res["status"] == "success"
    assert channel.written == ["uptime\n"]


def test_run_snippet_channel_failure_is_reported():
    service = _service()
    res = service.run_snippet(Snippet("", "uptime", "a@b"), ChannelTarget(BrokenChannel()))
    assert res["status"] == "error"
    assert res["detail"] == "channel closed"


def test_run_snippet_in_new_terminal():
    service = _service()
    opener = DummyOpener()
    connection = RemoteConnection("root", "example.com")
    res = service.run_snippet(Snippet("", "make", "root@example.com"), TerminalTarget(opener, connection, "/srv/app"))
    assert res["status"] == "success"
    assert opener.calls == [(connection, "make", "/srv/app")]

    failing = DummyOpener(returncode=255, stderr="Connection refused\n")
    res = service.run_snippet(Snippet("", "make", "root@example.com"), TerminalTarget(failing, connection))
    assert res["status"] == "error"
    assert res["detail"] == "Connection refused"
    assert res["returncode"] == 255
