"""
Render records into literal SQL value fragments.

Two modes:
- tuple: `(col1,col2) VALUES (v1,v2),(v1,v2)`, for use after `INSERT INTO t`
- assign: `col1=v1,col2=v2`, for use after `UPDATE t SET`

Field paths of nested records are written in full, excluding the outer
record's name, e.g. `Addr.City`. Leaves under a nested record that is None
render as NULL. No length limit is applied to the result; callers keep
statements within their server's limits.

Only bool, int, float and str fields, and fields substituted by a wire type,
have a literal form. Temporal leaf fields (datetime, date, time) do not:
substitute them with a wire type whose `to_wire()` returns the temporal
value, or leave them out of the field list.
"""
import enum
import logging
from collections.abc import Sequence
from typing import Any

from dbmap.exceptions import BuildError, CannotRenderError, EmptySequenceError
from dbmap.exceptions import MixedSequenceError, NilElementError
from dbmap.registry import FieldBinding, RecordMapping, Registry
from dbmap.sql import render_primitive, render_scalar
from dbmap.wire import encode_value, is_encodable

logger = logging.getLogger(__name__)

__all__ = ['Builder', 'Mode', 'is_renderable']

_SCALARS = (bool, int, float, str)


class Mode(enum.Enum):
    TUPLE = 'tuple'
    ASSIGN = 'assign'


def is_renderable(binding: FieldBinding) -> bool:
    """Check whether a field's wire type has a literal form."""
    return is_encodable(binding.wire_type) or issubclass(binding.wire_type, _SCALARS)


class Builder:
    """Value-string builder bound to a registry.

    Creating a builder seals the registry.
    """

    def __init__(self, registry: Registry) -> None:
        registry.seal()
        self.registry = registry
        self.options = registry.options

    def build(self, data: Any, *fields: str, mode: Mode | None = None) -> str:
        """Render records into a SQL value fragment.

        Args:
            data: A record instance, or a sequence of instances of one type
            fields: Field paths to render; all mapped fields when omitted
            mode: Mode.TUPLE or Mode.ASSIGN; defaults to TUPLE for sequences
                and ASSIGN for single records

        Raises
            UnmappedTypeError: If the record type is not registered
            UnknownFieldError: If a field is not mapped for the type
            NilElementError: If a sequence element is None
            EmptySequenceError: If the sequence is empty
            MixedSequenceError: If sequence elements differ in type
            CannotRenderError: If a value has no literal form
        """
        if isinstance(data, Sequence) and not isinstance(data, str | bytes):
            if mode is Mode.ASSIGN:
                raise BuildError('assignment mode takes a single record')
            return self._values(self._records(data), fields)
        if data is None:
            raise BuildError('data is None')
        if mode is Mode.TUPLE:
            return self._values([data], fields)
        return self._assignments(data, fields)

    def _records(self, data: Sequence) -> Sequence:
        if not data:
            raise EmptySequenceError('data is empty')
        expected = None
        for i, record in enumerate(data):
            if record is None:
                raise NilElementError(i)
            if expected is None:
                expected = type(record)
            elif type(record) is not expected:
                raise MixedSequenceError(i, expected, type(record))
        return data

    def _bindings(self, mapping: RecordMapping, fields: tuple[str, ...]) -> list[FieldBinding]:
        if fields:
            return [mapping.by_field(path) for path in fields]
        bindings = [mapping.fields[path] for path in mapping.order]
        if self.options.skip_unrenderable_defaults:
            skipped = [b.path for b in bindings if not is_renderable(b)]
            if skipped:
                logger.debug(f'Skipping unrenderable fields of '
                             f'{mapping.record_type.__qualname__}: {skipped}')
                bindings = [b for b in bindings if is_renderable(b)]
        return bindings

    def _literal(self, binding: FieldBinding, record: Any) -> str:
        """Render one field value.

        Wire types encode to a primitive first; other values render by
        scalar kind.
        """
        value = binding.get(record)
        try:
            if value is not None and is_encodable(binding.wire_type):
                return render_primitive(encode_value(binding.wire_type, value), self.options.quote)
            return render_scalar(value, self.options.quote)
        except TypeError as e:
            raise CannotRenderError(binding.path, type(value)) from e

    def _values(self, records: Sequence, fields: tuple[str, ...]) -> str:
        mapping = self.registry.mapping(type(records[0]))
        bindings = self._bindings(mapping, fields)
        header = ','.join(b.column for b in bindings)
        tuples = (
            '(' + ','.join(self._literal(b, record) for b in bindings) + ')'
            for record in records
            )
        result = f'({header}) VALUES ' + ','.join(tuples)
        logger.debug(f'Built {len(records)} {mapping.record_type.__qualname__} value tuples')
        return result

    def _assignments(self, record: Any, fields: tuple[str, ...]) -> str:
        mapping = self.registry.mapping(type(record))
        bindings = self._bindings(mapping, fields)
        return ','.join(f'{b.column}={self._literal(b, record)}' for b in bindings)
