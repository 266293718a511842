"""Capture/restore module -- snapshot a record graph and bring it back.

Engines::

    from recap.capture.engine import capture_record
    from recap.capture.restorer import restore_record

Storage::

    from recap.capture.storage import CaptureStorage

Facade::

    from recap.capture.manager import CaptureManager
"""

from recap.capture.engine import capture_record
from recap.capture.manager import CaptureManager
from recap.capture.models import CapturedRecord, CaptureDocument, SpecNode, normalize_spec
from recap.capture.restorer import restore_record
from recap.capture.storage import CaptureStorage, FlushFailure, FlushReport

__all__ = [
    "capture_record",
    "restore_record",
    "normalize_spec",
    "CaptureDocument",
    "CaptureManager",
    "CaptureStorage",
    "CapturedRecord",
    "FlushFailure",
    "FlushReport",
    "SpecNode",
]
