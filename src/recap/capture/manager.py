"""High-level entry points tying a host, the engines and storage together.

Usage::

    from recap import CaptureManager
    from recap.host.sqlalchemy import SQLAlchemyHost

    manager = CaptureManager(SQLAlchemyHost(session))
    path = manager.take(user, associations=["posts", {"posts": "comments"}])
    ...
    manager.restore(user, path, merge=True)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from recap.capture.engine import capture_record
from recap.capture.models import CaptureDocument
from recap.capture.restorer import restore_record
from recap.capture.storage import CaptureStorage, FlushReport
from recap.core.config import RecapConfig, load_config
from recap.host.base import Host

logger = logging.getLogger(__name__)


class CaptureManager:
    """Capture records to disk and restore them later.

    Parameters
    ----------
    host:
        Host persistence layer used to wrap live objects and to run
        restores transactionally.
    storage:
        Where documents are kept.  Defaults to a :class:`CaptureStorage`
        configured from ``recap.toml``.
    config:
        Explicit configuration; loaded from *project_path* when omitted.
    """

    def __init__(
        self,
        host: Host,
        storage: CaptureStorage | None = None,
        *,
        config: RecapConfig | None = None,
        project_path: Path | None = None,
    ) -> None:
        self._host = host
        self._config = config or load_config(project_path)
        self._storage = storage or CaptureStorage(
            self._config.storage.root,
            max_name_length=self._config.storage.max_name_length,
            indent=self._config.storage.indent,
            project_path=project_path,
        )

    @property
    def storage(self) -> CaptureStorage:
        return self._storage

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def capture(self, obj: Any, associations: Any = ()) -> CaptureDocument:
        """Build a document for *obj* without persisting it."""
        record = self._host.wrap(obj)
        return capture_record(
            record,
            associations,
            max_depth=self._config.capture.max_depth,
            redact=self._config.capture.redact_sensitive,
        )

    def take(self, obj: Any, associations: Any = (), name: str | None = None) -> Path:
        """Capture *obj* and save it.  Returns the document's path."""
        if name is not None:
            self._storage.validate_name(name)
        document = self.capture(obj, associations)
        return self._storage.save(document.model, document.record_id, document, name)

    def load(self, location: Path | str) -> CaptureDocument:
        return self._storage.load(location)

    def restore(self, obj: Any, location: Path | str, *, merge: bool = False) -> None:
        """Restore *obj* from the document stored at *location*."""
        document = self._storage.load(location)
        self.apply(obj, document, merge=merge)

    def apply(self, obj: Any, document: CaptureDocument, *, merge: bool = False) -> None:
        """Restore *obj* from an in-memory *document*."""
        record = self._host.wrap(obj)
        restore_record(
            self._host,
            record,
            document,
            merge=merge,
            max_depth=self._config.capture.max_depth,
        )

    def flush(self, namespace: str) -> FlushReport:
        return self._storage.flush(namespace)

    def list_captures(self, namespace: str | None = None) -> list[Path]:
        return self._storage.list_captures(namespace)
