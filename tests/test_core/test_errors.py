"""Tests for error messages and attributes."""

from __future__ import annotations

from recap.core.errors import (
    AssociationResolutionError,
    DepthLimitExceeded,
    IdentityMismatch,
    RecapError,
    StorageError,
)


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(StorageError, RecapError)
        assert issubclass(IdentityMismatch, RecapError)

    def test_identity_mismatch_message(self):
        err = IdentityMismatch(3, 4)
        assert err.expected == 3
        assert err.actual == 4
        assert "3" in str(err) and "4" in str(err)

    def test_association_error_path(self):
        err = AssociationResolutionError("comments", "boom", path=("posts", "comments"))
        assert err.association == "comments"
        assert err.path == ("posts", "comments")
        assert "'posts.comments'" in str(err)
        assert str(err).endswith(": boom")

    def test_association_error_default_path(self):
        assert AssociationResolutionError("posts").path == ("posts",)

    def test_depth_limit_message(self):
        err = DepthLimitExceeded(2, ("a", "b", "c"))
        assert "2" in str(err)
        assert "a.b.c" in str(err)
