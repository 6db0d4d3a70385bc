"""SnippetShelf application facade and command line interface."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from shelfcore.config_manager import ConfigManager
from shelfcore.execution import ChannelTarget, TerminalTarget
from shelfcore.key_value_store import FileKeyValueStore
from shelfcore.models import RemoteConnection, Snippet
from shelfcore.snippet_codec import get_codec
from shelfcore.snippet_service import SnippetService
from shelfcore.snippet_store import SnippetStore
from shelfcore.ssh_adapter import SSHAdapter


logger = logging.getLogger("snippetshelf")


def _row(index: int, snippet: Snippet) -> Dict[str, Any]:
    return {
        "index": index,
        "title": snippet.display_title,
        "subtitle": snippet.subtitle,
        "snippet": snippet.to_record(),
    }


class SnippetShelfAPI:
    """Backend surface a snippets screen talks to.

    Rows are addressed by their index in the list currently shown for an
    owner and query, the same way a table view addresses them.
    """

    def __init__(self, base_dir: Optional[Path] = None, ssh: Optional[SSHAdapter] = None) -> None:
        self.config_manager = ConfigManager(base_dir=base_dir)
        self.storage = FileKeyValueStore(self.config_manager.get_data_root())
        self.snippet_store = SnippetStore(
            self.storage,
            codec=get_codec(self.config_manager.get_codec_name()),
            key=self.config_manager.get_storage_key(),
        )
        self.snippet_service = SnippetService(self.snippet_store)
        self.ssh = ssh or SSHAdapter()
        logger.debug("Snippets stored in %s under '%s'", self.storage.root, self.snippet_store.key)

    def _snippet_at(self, owner: str, index: int, query: Optional[str] = None) -> Optional[Snippet]:
        visible = self.snippet_service.visible_snippets(owner, query)
        if 0 <= index < len(visible):
            return visible[index]
        return None

    def list_snippets(self, owner: str, query: Optional[str] = None) -> List[Dict[str, Any]]:
        return [_row(i, s) for i, s in enumerate(self.snippet_service.visible_snippets(owner, query))]

    def list_owners(self) -> List[str]:
        return self.snippet_service.list_owners()

    def create_snippet(self, owner: str, content: str, title: str = "") -> Dict[str, Any]:
        return self.snippet_service.create_snippet(title, content, owner)

    def delete_snippet(self, owner: str, index: int, query: Optional[str] = None) -> Dict[str, Any]:
        snippet = self._snippet_at(owner, index, query)
        if snippet is None:
            return {"status": "error", "detail": f"No snippet at row {index}"}
        return self.snippet_service.delete_snippet(snippet)

    def move_snippet(self, owner: str, index: int, to_index: int, query: Optional[str] = None) -> Dict[str, Any]:
        if not self.snippet_service.can_reorder(query):
            return {"status": "error", "detail": "Clear the search to reorder snippets"}
        snippet = self._snippet_at(owner, index)
        if snippet is None:
            return {"status": "error", "detail": f"No snippet at row {index}"}
        return self.snippet_service.move_snippet(snippet, to_index)

    def run_in_terminal(
        self,
        owner: str,
        index: int,
        directory: Optional[str] = None,
        port: int = 22,
        query: Optional[str] = None,
    ) -> Dict[str, Any]:
        snippet = self._snippet_at(owner, index, query)
        if snippet is None:
            return {"status": "error", "detail": f"No snippet at row {index}"}
        target = TerminalTarget(self.ssh.open_terminal, RemoteConnection.parse(owner, port=port), directory=directory)
        return self.snippet_service.run_snippet(snippet, target)

    def run_in_channel(self, owner: str, index: int, channel: Any, query: Optional[str] = None) -> Dict[str, Any]:
        snippet = self._snippet_at(owner, index, query)
        if snippet is None:
            return {"status": "error", "detail": f"No snippet at row {index}"}
        return self.snippet_service.run_snippet(snippet, ChannelTarget(channel))

    def import_snippet_pack(self, file_path: str, owner: Optional[str] = None) -> Dict[str, Any]:
        return self.snippet_service.import_pack(file_path, owner=owner)

    def export_snippet_pack(self, owner: str, file_path: str) -> Dict[str, Any]:
        return self.snippet_service.export_pack(owner, file_path)


def _report(result: Dict[str, Any]) -> None:
    if result.get("status") == "success":
        click.secho(result.get("detail", "Done"), fg="green")
        return
    click.secho(result.get("detail", "Failed"), fg="red", err=True)
    sys.exit(1)


def _owner_arg(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        RemoteConnection.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from None
    return value


@click.group()
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None, help="Preferences directory.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[Path], verbose: bool) -> None:
    """Store, search, reorder and run command snippets per SSH connection."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="[%(levelname)s] %(message)s")
    ctx.obj = SnippetShelfAPI(base_dir=data_dir)


@cli.command(name="list")
@click.argument("owner", callback=_owner_arg)
@click.option("--query", "-q", default=None, help="Case-insensitive filter on title or content.")
@click.pass_obj
def list_cmd(api: SnippetShelfAPI, owner: str, query: Optional[str]) -> None:
    """List the snippets of OWNER (username@host)."""
    rows = api.list_snippets(owner, query)
    if not rows:
        click.secho("No snippets found.", fg="yellow")
        return
    for row in rows:
        line = f"{row['index']:>3}  {click.style(row['title'], bold=True)}"
        if row["subtitle"]:
            line += f"  {row['subtitle']}"
        click.echo(line)


@cli.command(name="owners")
@click.pass_obj
def owners_cmd(api: SnippetShelfAPI) -> None:
    """List connections that have snippets."""
    for owner in api.list_owners():
        click.echo(owner)


@cli.command(name="add")
@click.argument("owner", callback=_owner_arg)
@click.argument("content")
@click.option("--title", "-t", default="", help="Optional display title.")
@click.pass_obj
def add_cmd(api: SnippetShelfAPI, owner: str, content: str, title: str) -> None:
    """Add a snippet running CONTENT to OWNER."""
    _report(api.create_snippet(owner, content, title=title))


@cli.command(name="remove")
@click.argument("owner", callback=_owner_arg)
@click.argument("index", type=int)
@click.pass_obj
def remove_cmd(api: SnippetShelfAPI, owner: str, index: int) -> None:
    """Remove the snippet at INDEX in OWNER's list."""
    _report(api.delete_snippet(owner, index))


@cli.command(name="move")
@click.argument("owner", callback=_owner_arg)
@click.argument("index", type=int)
@click.argument("to_index", type=int)
@click.pass_obj
def move_cmd(api: SnippetShelfAPI, owner: str, index: int, to_index: int) -> None:
    """Move the snippet at INDEX to TO_INDEX in OWNER's list."""
    _report(api.move_snippet(owner, index, to_index))


@cli.command(name="run")
@click.argument("owner", callback=_owner_arg)
@click.argument("index", type=int)
@click.option("--directory", "-d", default=None, help="Remote directory to run in.")
@click.option("--port", "-p", type=int, default=22, show_default=True)
@click.option("--dry-run", is_flag=True, help="Print the ssh command instead of running it.")
@click.pass_obj
def run_cmd(api: SnippetShelfAPI, owner: str, index: int, directory: Optional[str], port: int, dry_run: bool) -> None:
    """Run the snippet at INDEX on OWNER over ssh."""
    if dry_run:
        rows = api.list_snippets(owner)
        if not 0 <= index < len(rows):
            _report({"status": "error", "detail": f"No snippet at row {index}"})
        connection = RemoteConnection.parse(owner, port=port)
        argv = api.ssh.build_command(connection, rows[index]["snippet"]["content"], directory=directory)
        click.echo(" ".join(argv))
        return
    _report(api.run_in_terminal(owner, index, directory=directory, port=port))


@cli.command(name="import")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--owner", default=None, callback=_owner_arg, help="Assign every imported snippet to this connection.")
@click.pass_obj
def import_cmd(api: SnippetShelfAPI, path: str, owner: Optional[str]) -> None:
    """Import a JSON or YAML snippet pack."""
    _report(api.import_snippet_pack(path, owner=owner))


@cli.command(name="export")
@click.argument("owner", callback=_owner_arg)
@click.argument("path", type=click.Path(dir_okay=False))
@click.pass_obj
def export_cmd(api: SnippetShelfAPI, owner: str, path: str) -> None:
    """Export OWNER's snippets to a JSON or YAML pack."""
    _report(api.export_snippet_pack(owner, path))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
