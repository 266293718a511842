"""File storage for capture documents.

Documents live at ``{root}/{namespace}/{filename}.json`` where the
namespace is the lowercased entity type with every character outside
``[a-z0-9]`` folded to ``_``.  Writes go to a temporary file in the target
directory and are ``os.replace``-d into place, so a reader never sees a
half-written document.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from recap.capture.models import REQUIRED_KEYS, CaptureDocument
from recap.capture.serializer import dumps_document, loads_document
from recap.core.config import load_config
from recap.core.errors import StorageError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_MAX_NAME_LENGTH = 100
VALID_NAME_RE = re.compile(r"\A[A-Za-z0-9._-]+\Z")
DOCUMENT_SUFFIX = ".json"
_TEMP_SUFFIX = ".tmp"


def namespace_for(entity_type: str) -> str:
    """Fold an entity type name into a safe directory name."""
    return re.sub(r"[^a-z0-9]", "_", str(entity_type).lower())


@dataclass
class FlushFailure:
    path: Path
    error: OSError

    @property
    def permission_denied(self) -> bool:
        return isinstance(self.error, PermissionError)


@dataclass
class FlushReport:
    """Outcome of :meth:`CaptureStorage.flush`.

    ``error`` is set when the namespace as a whole could not be processed
    (missing or unreadable directory); ``failures`` lists individual files
    that could not be deleted.
    """

    namespace: str
    directory: Path
    deleted: list[Path] = field(default_factory=list)
    failures: list[FlushFailure] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and not self.failures


class CaptureStorage:
    """Atomic JSON file store for :class:`CaptureDocument` s.

    Usage::

        storage = CaptureStorage()                 # ./captures, or recap.toml
        path = storage.save("User", 7, document)
        document = storage.load(path)
        storage.flush("user")
    """

    def __init__(
        self,
        root: Path | str | None = None,
        *,
        max_name_length: int | None = None,
        indent: int | None = None,
        project_path: Path | None = None,
    ) -> None:
        cfg = load_config(project_path)
        self.root = Path(root) if root is not None else cfg.storage.root
        if max_name_length is None:
            max_name_length = cfg.storage.max_name_length
        self._max_name_length = DEFAULT_MAX_NAME_LENGTH if max_name_length is None else max_name_length
        self._indent = cfg.storage.indent if indent is None else indent

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def save(
        self,
        entity_type: str,
        entity_id: Any,
        document: CaptureDocument | dict[str, Any],
        name: str | None = None,
    ) -> Path:
        """Persist *document* and return its final path.

        Raises :class:`StorageError` for invalid names or documents, an
        uncreatable directory, or a failed write.  Nothing is created on
        disk when validation fails.
        """
        if not entity_type:
            raise StorageError("Entity type is required to save a capture")
        if entity_id is None:
            raise StorageError("Cannot save capture of unsaved record (identifier is None)")

        data = document.to_dict() if isinstance(document, CaptureDocument) else document
        self._validate_document(data)

        namespace = namespace_for(entity_type)
        file_name = self._file_name(namespace, entity_id, name)
        try:
            payload = dumps_document(data, indent=self._indent)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Capture data is not serialisable: {exc}") from exc

        directory = self._ensure_directory(namespace)
        file_path = directory / file_name
        self._atomic_write(file_path, payload)

        logger.info("Capture saved to %s", file_path)
        return file_path

    def _validate_document(self, data: Any) -> None:
        if not isinstance(data, dict):
            raise StorageError("Capture data must be a dict")
        missing = [key for key in REQUIRED_KEYS if key not in data]
        if missing:
            raise StorageError(f"Missing required keys in capture data: {', '.join(missing)}")

    def _file_name(self, namespace: str, entity_id: Any, name: str | None) -> str:
        if name is None:
            timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
            return f"{namespace}_{namespace_for(entity_id)}_{timestamp}{DOCUMENT_SUFFIX}"

        self.validate_name(name)
        if name.endswith(DOCUMENT_SUFFIX):
            return name
        return f"{name}{DOCUMENT_SUFFIX}"

    def validate_name(self, name: str) -> None:
        """Raise :class:`StorageError` unless *name* is an acceptable file name."""
        if not name:
            raise StorageError("Filename cannot be empty")
        if len(name) > self._max_name_length:
            raise StorageError(f"Filename too long (max {self._max_name_length} chars)")
        if not VALID_NAME_RE.match(name) or name in (".", ".."):
            raise StorageError(f"Filename contains invalid characters: {name!r}")

    def _ensure_directory(self, namespace: str) -> Path:
        directory = self.root / namespace
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to create directory '{directory}': {exc}") from exc
        return directory

    def _atomic_write(self, file_path: Path, payload: str) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=file_path.parent,
                prefix=f".{file_path.name}.",
                suffix=_TEMP_SUFFIX,
            )
        except OSError as exc:
            raise StorageError(f"Failed to create temporary file for '{file_path}': {exc}") from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, file_path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write capture file '{file_path}': {exc}") from exc
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self, location: Path | str) -> CaptureDocument:
        """Read and validate the document at *location*.

        Every failure is reported as :class:`StorageError`.
        """
        path = Path(location)
        try:
            self._validate_path(path)
            text = path.read_text(encoding="utf-8")
            data = loads_document(text)
            return CaptureDocument.from_dict(data)
        except (StorageError, OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StorageError(f"Failed to load capture: {exc}") from exc

    @staticmethod
    def _validate_path(path: Path) -> None:
        if not path.exists():
            raise StorageError(f"File does not exist: {path}")
        if path.is_dir():
            raise StorageError(f"Path is a directory, not a file: {path}")
        if not path.is_file():
            raise StorageError(f"Path is not a regular file: {path}")
        if not os.access(path, os.R_OK):
            raise StorageError(f"No read permission for file: {path}")

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_captures(self, namespace: str | None = None) -> list[Path]:
        """Return stored documents, newest first."""
        if namespace is not None:
            directories = [self.root / namespace_for(namespace)]
        elif self.root.is_dir():
            directories = sorted(p for p in self.root.iterdir() if p.is_dir())
        else:
            directories = []

        documents = [
            path
            for directory in directories
            if directory.is_dir()
            for path in directory.glob(f"*{DOCUMENT_SUFFIX}")
            if path.is_file()
        ]
        return sorted(documents, key=lambda p: (p.stat().st_mtime, p.name), reverse=True)

    # ------------------------------------------------------------------
    # Flush
    # ------------------------------------------------------------------

    def flush(self, namespace: str) -> FlushReport:
        """Delete every regular file directly inside *namespace*.

        Best effort: a missing or unreadable directory and individual files
        that cannot be deleted are logged and recorded on the returned
        :class:`FlushReport` instead of being raised.
        """
        directory = self.root / namespace_for(namespace)
        report = FlushReport(namespace=namespace, directory=directory)

        if not directory.is_dir():
            report.error = f"Directory '{directory}' does not exist."
            logger.warning("Flush skipped: %s", report.error)
            return report

        try:
            files = sorted(p for p in directory.iterdir() if p.is_file())
        except OSError as exc:
            report.error = f"Could not read directory '{directory}': {exc}"
            logger.error("Flush failed: %s", report.error)
            return report

        if not files:
            logger.info("No files found in %s to delete.", directory)
            return report

        for path in files:
            try:
                path.unlink()
            except PermissionError as exc:
                report.failures.append(FlushFailure(path, exc))
                logger.warning("Permission denied when deleting file: %s", path)
            except OSError as exc:
                report.failures.append(FlushFailure(path, exc))
                logger.warning("Failed to delete file: %s. Error: %s", path, exc)
            else:
                report.deleted.append(path)

        logger.info("Flushed %d file(s) in %s", len(report.deleted), directory)
        return report
