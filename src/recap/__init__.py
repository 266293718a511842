"""recap -- capture a record graph to disk and restore it later."""

from recap._version import __version__
from recap.capture.engine import capture_record
from recap.capture.manager import CaptureManager
from recap.capture.models import CaptureDocument
from recap.capture.restorer import restore_record
from recap.capture.storage import CaptureStorage, FlushReport
from recap.core.errors import (
    AssociationResolutionError,
    DepthLimitExceeded,
    IdentityMismatch,
    InvalidInput,
    RecapError,
    StorageError,
    ValidationFailure,
)

__all__ = [
    "__version__",
    "capture_record",
    "restore_record",
    "CaptureDocument",
    "CaptureManager",
    "CaptureStorage",
    "FlushReport",
    "AssociationResolutionError",
    "DepthLimitExceeded",
    "IdentityMismatch",
    "InvalidInput",
    "RecapError",
    "StorageError",
    "ValidationFailure",
]
