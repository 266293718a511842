"""SQLAlchemy ORM host for the capture and restore engines.

Usage::

    from recap.host.sqlalchemy import SQLAlchemyHost

    host = SQLAlchemyHost(session)
    record = host.wrap(user)

Attributes are the mapper's column attributes, associations are its
relationships.  Values coming back from a JSON document are coerced to the
column's Python type before assignment.
"""

from __future__ import annotations

import base64
import enum
import logging
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Iterator, Mapping

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable, SQLAlchemyError
from sqlalchemy.orm import ColumnProperty, Mapper, RelationshipProperty, Session
from sqlalchemy.orm.state import InstanceState

from recap.core.errors import (
    AssociationResolutionError,
    InvalidInput,
    ValidationFailure,
)
from recap.host.base import ResolvedAssociation

logger = logging.getLogger(__name__)


def _primary_key_keys(mapper: Mapper) -> list[str]:
    return [mapper.get_property_by_column(col).key for col in mapper.primary_key]


def _coerce(prop: ColumnProperty, value: Any) -> Any:
    """Convert a JSON-decoded *value* back to the column's Python type."""
    if value is None:
        return None
    try:
        python_type = prop.columns[0].type.python_type
    except NotImplementedError:
        return value

    if isinstance(python_type, type) and issubclass(python_type, enum.Enum):
        if isinstance(value, python_type):
            return value
        # Members are written by name; str and int mixins may arrive as values.
        try:
            return python_type[value]
        except (KeyError, TypeError):
            return python_type(value)

    if isinstance(value, str):
        if python_type is datetime:
            return datetime.fromisoformat(value)
        if python_type is date:
            return date.fromisoformat(value)
        if python_type is time:
            return time.fromisoformat(value)
        if python_type is Decimal:
            return Decimal(value)
        if python_type is bytes:
            return base64.b64decode(value, validate=True)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        if python_type is Decimal:
            return Decimal(str(value))
        if python_type is timedelta:
            return timedelta(seconds=value)
    return value


class SQLAlchemyRecord:
    """A mapped instance bound to the session of its :class:`SQLAlchemyHost`."""

    def __init__(self, obj: Any, host: SQLAlchemyHost) -> None:
        self._obj = obj
        self._host = host
        self._mapper: Mapper = sa_inspect(obj).mapper

    def __repr__(self) -> str:
        return f"<SQLAlchemyRecord {self.type_name} id={self.identifier!r}>"

    @property
    def obj(self) -> Any:
        return self._obj

    @property
    def type_name(self) -> str:
        return self._mapper.class_.__name__

    @property
    def identifier(self) -> Any:
        identity = sa_inspect(self._obj).identity
        if identity is None:
            return None
        if len(identity) == 1:
            return identity[0]
        return list(identity)

    def read_attributes(self) -> dict[str, Any]:
        return {prop.key: getattr(self._obj, prop.key) for prop in self._mapper.column_attrs}

    def resolve_association(self, name: str) -> ResolvedAssociation:
        rel = self._mapper.relationships.get(name)
        if rel is None:
            return ResolvedAssociation.unknown()

        value = getattr(self._obj, name)
        if rel.uselist:
            return ResolvedAssociation.collection(self._host.wrap(item) for item in value)
        if value is None:
            return ResolvedAssociation.empty()
        return ResolvedAssociation.single(self._host.wrap(value))

    def related_identifier_key(self, name: str) -> str | None:
        keys = _primary_key_keys(self._relationship(name).mapper)
        # Composite keys are never matched by identity.
        return keys[0] if len(keys) == 1 else None

    def update_attributes(self, attributes: Mapping[str, Any]) -> None:
        self._assign(self._obj, self._mapper, attributes)
        self._host.flush()

    def create_related(self, name: str, attributes: Mapping[str, Any]) -> SQLAlchemyRecord:
        rel = self._relationship(name)
        child = rel.mapper.class_()
        self._assign(child, rel.mapper, attributes)

        if rel.uselist:
            getattr(self._obj, name).append(child)
        else:
            setattr(self._obj, name, child)
        self._host.session.add(child)
        self._host.flush()

        logger.debug("Created %s through %s.%s", rel.mapper.class_.__name__, self.type_name, name)
        return SQLAlchemyRecord(child, self._host)

    def _relationship(self, name: str) -> RelationshipProperty:
        rel = self._mapper.relationships.get(name)
        if rel is None:
            raise AssociationResolutionError(
                name, f"{self.type_name} has no relationship named {name!r}"
            )
        return rel

    @staticmethod
    def _assign(obj: Any, mapper: Mapper, attributes: Mapping[str, Any]) -> None:
        primary_keys = set(_primary_key_keys(mapper))
        columns = mapper.column_attrs
        for key, value in attributes.items():
            prop = columns.get(key)
            if prop is None:
                raise ValidationFailure(
                    f"unknown attribute {key!r} for {mapper.class_.__name__}"
                )
            if key in primary_keys:
                continue
            try:
                setattr(obj, key, _coerce(prop, value))
            except (TypeError, ValueError) as exc:
                raise ValidationFailure(
                    f"invalid value for {mapper.class_.__name__}.{key}: {exc}"
                ) from exc


class SQLAlchemyHost:
    """Host backed by a single :class:`~sqlalchemy.orm.Session`.

    :meth:`transaction` commits on success and rolls the session back on
    any exception, so a restore is all-or-nothing.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def wrap(self, obj: Any) -> SQLAlchemyRecord:
        if isinstance(obj, SQLAlchemyRecord):
            return obj
        try:
            state = sa_inspect(obj)
        except NoInspectionAvailable as exc:
            raise InvalidInput(
                f"{type(obj).__name__} is not a mapped SQLAlchemy instance"
            ) from exc
        if not isinstance(state, InstanceState):
            raise InvalidInput(f"{obj!r} is not a mapped SQLAlchemy instance")
        return SQLAlchemyRecord(obj, self)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        try:
            yield
        except Exception:
            logger.debug("Rolling back session after failed transaction")
            self.session.rollback()
            raise

        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            logger.debug("Rolling back session after failed commit")
            self.session.rollback()
            raise ValidationFailure(f"database rejected commit: {exc}") from exc

    def flush(self) -> None:
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            raise ValidationFailure(f"database rejected changes: {exc}") from exc
