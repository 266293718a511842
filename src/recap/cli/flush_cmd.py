"""recap flush command."""

from __future__ import annotations

from pathlib import Path

import click

from recap.capture.storage import CaptureStorage, namespace_for
from recap.core.output import print_flush_report


@click.command()
@click.argument("namespace")
@click.option("--root", type=click.Path(path_type=Path), default=None, help="Capture root directory")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def flush(namespace: str, root: Path | None, yes: bool):
    """Delete every capture stored under NAMESPACE."""
    storage = CaptureStorage(root, project_path=Path.cwd())

    if not yes:
        click.confirm(f"Delete all captures in {storage.root / namespace_for(namespace)}?", abort=True)

    report = storage.flush(namespace)
    print_flush_report(report)
    if report.error:
        raise SystemExit(1)
