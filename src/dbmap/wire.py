"""
Wire type capabilities and the type substitution table.

A wire type is the type actually used for database I/O. It implements both
capabilities:

- DecodableFromWire: `from_wire(cls, value)` builds an instance from a
  primitive value produced by the database driver
- EncodableToWire: `to_wire(self)` returns a primitive value for the database

Natural in-memory types (e.g. `list`) may be substituted by an equivalent
wire type (e.g. a `list` subclass that stores itself as JSON text) so that
records keep using the natural type while the registry uses the wire type.

Usage:
    class JsonList(list):
        @classmethod
        def from_wire(cls, value):
            return cls(json.loads(value))

        def to_wire(self):
            return json.dumps(self)

    table = TypeSubstitutionTable()
    table.add(list, JsonList)
"""
import logging
from typing import Any, Protocol, runtime_checkable

from dbmap.exceptions import BadSubstitutionError, DuplicateSubstitutionError

logger = logging.getLogger(__name__)

__all__ = [
    'DecodableFromWire',
    'EncodableToWire',
    'TypeSubstitutionTable',
    'is_decodable',
    'is_encodable',
    'is_wire_type',
    'as_type',
    'encode_value',
]


@runtime_checkable
class DecodableFromWire(Protocol):
    """Type that can be built from a primitive database value."""

    @classmethod
    def from_wire(cls, value: Any) -> Any:
        ...


@runtime_checkable
class EncodableToWire(Protocol):
    """Value that can render itself as a primitive database value."""

    def to_wire(self) -> Any:
        ...


def is_decodable(cls: type) -> bool:
    return isinstance(cls, DecodableFromWire)


def is_encodable(cls: type) -> bool:
    return isinstance(cls, EncodableToWire)


def is_wire_type(cls: type) -> bool:
    """Check if a type implements both wire capabilities."""
    return isinstance(cls, type) and is_decodable(cls) and is_encodable(cls)


def as_type(sample: Any) -> type:
    """Accept either a type or a (zero-valued) sample instance."""
    return sample if isinstance(sample, type) else type(sample)


def encode_value(wire: type, value: Any) -> Any:
    """Convert a natural value to the wire type and encode it.

    Values already of the wire type encode directly; others are converted
    with the wire type's constructor first.
    """
    if not isinstance(value, wire):
        value = wire(value)
    return value.to_wire()


class TypeSubstitutionTable:
    """Natural type to wire type substitutions.

    Read at registration time only. The registry owning the table rewrites
    already-built entries when a substitution is added.
    """

    def __init__(self) -> None:
        self._types: dict[type, type] = {}

    def __contains__(self, natural: type) -> bool:
        return natural in self._types

    def __len__(self) -> int:
        return len(self._types)

    def add(self, natural: Any, wire: Any) -> tuple[type, type]:
        """Record that `natural` is read and written through `wire`.

        Args:
            natural: Natural type or sample value
            wire: Wire type or sample value

        Returns
            Tuple of (natural type, wire type)

        Raises
            DuplicateSubstitutionError: If natural type already substituted
            BadSubstitutionError: If wire type is not compatible
        """
        natural, wire = as_type(natural), as_type(wire)
        if natural in self._types:
            raise DuplicateSubstitutionError(natural)
        if not issubclass(wire, natural):
            raise BadSubstitutionError(natural, wire, 'not convertible')
        if not is_decodable(wire):
            raise BadSubstitutionError(natural, wire, 'missing from_wire()')
        if not is_encodable(wire):
            raise BadSubstitutionError(natural, wire, 'missing to_wire()')
        self._types[natural] = wire
        logger.debug(f'Substituted {wire.__qualname__} for {natural.__qualname__}')
        return natural, wire

    def resolve(self, natural: type) -> type:
        """Return the wire type for `natural`, or `natural` itself."""
        return self._types.get(natural, natural)
