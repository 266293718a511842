"""recap show command."""

from __future__ import annotations

from pathlib import Path

import click

from recap.capture.serializer import dumps_document
from recap.capture.storage import CaptureStorage
from recap.core.errors import StorageError
from recap.core.output import error_console, print_document


@click.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the raw document as JSON")
def show(path: Path, as_json: bool):
    """Show the capture document stored at PATH."""
    storage = CaptureStorage(project_path=Path.cwd())
    try:
        document = storage.load(path)
    except StorageError as exc:
        error_console.print(f"[red]{exc}[/red]")
        raise SystemExit(1)

    if as_json:
        click.echo(dumps_document(document.to_dict()))
        return

    print_document(document, title=str(path))
