"""Rich terminal formatting for recap output."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.tree import Tree

from recap.capture.models import AssociationNode, CapturedRecord, CaptureDocument
from recap.capture.storage import FlushReport

console = Console()
error_console = Console(stderr=True)


def _format_value(value: Any, width: int = 60) -> str:
    text = repr(value)
    if len(text) > width:
        text = text[: width - 3] + "..."
    return text.replace("[", "\\[")


def _add_attributes(tree: Tree, attributes: dict[str, Any]) -> None:
    for key, value in attributes.items():
        tree.add(f"[cyan]{key}[/cyan] = {_format_value(value)}")


def _add_association(tree: Tree, name: str, node: AssociationNode) -> None:
    if isinstance(node, list):
        branch = tree.add(f"[bold magenta]{name}[/bold magenta] [dim]({len(node)} records)[/dim]")
        for index, entry in enumerate(node):
            _add_record(branch.add(f"[dim]\\[{index}][/dim]"), entry)
    else:
        _add_record(tree.add(f"[bold magenta]{name}[/bold magenta]"), node)


def _add_record(tree: Tree, record: CapturedRecord) -> None:
    _add_attributes(tree, record.attributes)
    for name, node in record.associations.items():
        _add_association(tree, name, node)


def document_tree(document: CaptureDocument) -> Tree:
    """Build a rich tree of a capture document."""
    tree = Tree(f"[bold]{document.model}[/bold] #{document.record_id}")
    _add_attributes(tree, document.attributes)
    for name, node in document.associations.items():
        _add_association(tree, name, node)
    return tree


def print_document(document: CaptureDocument, title: str = "") -> None:
    """Print a capture document as a tree inside a panel."""
    console.print(Panel(
        document_tree(document),
        title=f"[bold]{title or 'Capture'}[/bold]",
        border_style="blue",
        padding=(0, 1),
    ))


def print_flush_report(report: FlushReport) -> None:
    """Print the outcome of a namespace flush."""
    if report.error:
        console.print(f"  [red]❌ {report.error}[/red]")
        return

    if not report.deleted and not report.failures:
        console.print(f"  No files found in {report.directory} to delete.")
        return

    for failure in report.failures:
        reason = "Permission denied" if failure.permission_denied else str(failure.error)
        console.print(f"  [yellow]⚠️  {failure.path}[/yellow]  {reason}")

    color = "green" if report.ok else "yellow"
    console.print(
        f"  [{color}]Flushed {len(report.deleted)} file(s) in {report.directory}.[/{color}]"
    )
