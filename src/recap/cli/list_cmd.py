"""recap list command."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import click

from recap.capture.storage import CaptureStorage
from recap.core.output import console


@click.command("list")
@click.argument("namespace", required=False)
@click.option("--root", type=click.Path(path_type=Path), default=None, help="Capture root directory")
@click.option("--json", "as_json", is_flag=True, help="Export as JSON")
def list_cmd(namespace: str | None, root: Path | None, as_json: bool):
    """List stored captures, newest first.

    Pass a NAMESPACE (entity type, e.g. ``user``) to restrict the listing.
    """
    storage = CaptureStorage(root, project_path=Path.cwd())
    paths = storage.list_captures(namespace)

    if as_json:
        click.echo(json.dumps([str(p) for p in paths], indent=2))
        return

    if not paths:
        console.print("\n  No captures found.\n")
        return

    console.print(f"\n  [bold]Captures in {storage.root}[/bold]\n")
    for path in paths:
        saved = datetime.fromtimestamp(path.stat().st_mtime).strftime("%Y-%m-%d %H:%M:%S")
        console.print(f"  {path.parent.name}/{path.name}  [dim]{saved}[/dim]")
    console.print()
