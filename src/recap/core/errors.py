"""Exception hierarchy shared by the capture, restore and storage layers."""

from __future__ import annotations

from typing import Any, Sequence


class RecapError(Exception):
    """Base class for every error raised by recap."""


class InvalidInput(RecapError):
    """The root record does not satisfy the live persisted record capability."""


class IdentityMismatch(RecapError):
    """A capture document was restored onto a record with a different identifier."""

    def __init__(self, expected: Any, actual: Any) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"capture document belongs to record {expected!r}, "
            f"not to record {actual!r}"
        )


class AssociationResolutionError(RecapError):
    """Reading or writing a named association failed."""

    def __init__(
        self,
        association: str,
        message: str = "",
        *,
        path: Sequence[str] = (),
    ) -> None:
        self.association = association
        self.path = tuple(path) or (association,)
        detail = f": {message}" if message else ""
        super().__init__(
            f"association {'.'.join(self.path)!r} could not be resolved{detail}"
        )


class ValidationFailure(RecapError):
    """The host persistence layer rejected an update or a creation."""


class DepthLimitExceeded(RecapError):
    """Traversal went deeper than the configured ``max_depth``."""

    def __init__(self, max_depth: int, path: Sequence[str] = ()) -> None:
        self.max_depth = max_depth
        self.path = tuple(path)
        where = f" at {'.'.join(self.path)!r}" if self.path else ""
        super().__init__(f"association depth limit of {max_depth} exceeded{where}")


class StorageError(RecapError):
    """A capture document could not be saved, found, read or parsed."""
