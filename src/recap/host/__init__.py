"""Host persistence layer protocols and adapters.

The SQLAlchemy adapter lives in :mod:`recap.host.sqlalchemy` and is imported
explicitly so the core engines do not require SQLAlchemy at import time.
"""

from recap.host.base import AssociationKind, Host, Record, ResolvedAssociation

__all__ = [
    "AssociationKind",
    "Host",
    "Record",
    "ResolvedAssociation",
]
