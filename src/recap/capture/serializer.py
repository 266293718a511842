"""JSON encoding of capture documents, with optional sensitive-data redaction.

Attribute values that are not JSON-serialisable by default (datetimes,
decimals, enums, intervals, binary ...) are converted to stable JSON forms
that the SQLAlchemy host knows how to coerce back: enum members by name,
timedeltas as seconds and bytes as base64 text.  When redaction is requested, values whose
attribute names match known sensitive patterns are replaced with
``"<REDACTED>"``; restore skips such values instead of writing them.
"""

from __future__ import annotations

import base64
import enum
import json
import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

# ---------------------------------------------------------------------------
# Sensitive-key patterns
# ---------------------------------------------------------------------------

SENSITIVE_PATTERNS: list[str] = [
    r"api[_-]?key",
    r"secret",
    r"password",
    r"token",
    r"private[_-]?key",
    r"credential",
    r"ssn",
    r"credit[_-]?card",
]

_SENSITIVE_RE = re.compile(
    "|".join(SENSITIVE_PATTERNS),
    re.IGNORECASE,
)

REDACTED_PLACEHOLDER = "<REDACTED>"


def is_sensitive_key(key: str) -> bool:
    """Return ``True`` when *key* matches any sensitive pattern."""
    return bool(_SENSITIVE_RE.search(str(key)))


def redact_attributes(attributes: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *attributes* with sensitive values replaced."""
    return {
        key: REDACTED_PLACEHOLDER if is_sensitive_key(key) else value
        for key, value in attributes.items()
    }


def strip_redacted(attributes: dict[str, Any]) -> dict[str, Any]:
    """Drop attributes whose value is the redaction placeholder."""
    return {key: value for key, value in attributes.items() if value != REDACTED_PLACEHOLDER}


# ---------------------------------------------------------------------------
# JSON encoder
# ---------------------------------------------------------------------------

class _DocumentEncoder(json.JSONEncoder):
    """JSONEncoder that converts common column types to JSON values."""

    def default(self, o: Any) -> Any:  # noqa: ANN401
        if isinstance(o, enum.Enum):
            return o.name
        if isinstance(o, (datetime, date, time)):
            return o.isoformat()
        if isinstance(o, timedelta):
            return o.total_seconds()
        if isinstance(o, Decimal):
            return str(o)
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, Path):
            return str(o)
        if isinstance(o, (bytes, bytearray, memoryview)):
            return base64.b64encode(bytes(o)).decode("ascii")
        if isinstance(o, (set, frozenset)):
            return sorted(str(i) for i in o)
        if isinstance(o, type):
            return f"{o.__module__}.{o.__qualname__}"
        # Last resort: repr()
        return repr(o)


def dumps_document(data: dict[str, Any], *, indent: int | None = 2) -> str:
    """Serialise a document dict to pretty-printed JSON text.

    Raises ``ValueError`` for circular structures and ``TypeError`` for
    mapping keys JSON cannot represent, exactly like :func:`json.dumps`.
    """
    return json.dumps(data, cls=_DocumentEncoder, indent=indent, ensure_ascii=False)


def loads_document(text: str) -> Any:
    """Parse document text.  Raises ``json.JSONDecodeError`` on bad input."""
    return json.loads(text)
