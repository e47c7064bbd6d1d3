"""
Mapping registry between record types and table columns.

Record types are dataclasses. Registration walks every public field
depth-first (nested dataclasses are walked, temporal leaf types are not) and
builds, per outer record type:

- column -> field binding, used by the decoder
- field path -> field binding, used by the builder
- default field order, used by the builder when no fields are given

Field paths are dotted attribute names excluding the outer type's own name,
e.g. `Addr.City` for `Person.Addr.City`. Column names are lowercase.

The registry is built once during startup from a single thread and then
sealed; after sealing it is read-only and may be shared freely.
"""
import dataclasses
import logging
import operator
import threading
import types
import typing
from collections.abc import Callable, Iterator
from dataclasses import dataclass, fields
from typing import Any

from dbmap.exceptions import BadShapeError, BadTagError, ConcurrentRegistrationError
from dbmap.exceptions import DuplicateColumnError, DuplicateTypeError
from dbmap.exceptions import RegistrationSealedError, UnknownFieldError
from dbmap.exceptions import UnmappedTypeError
from dbmap.options import MappingOptions
from dbmap.tags import column_for_field
from dbmap.wire import TypeSubstitutionTable, as_type

from libb import load_options

logger = logging.getLogger(__name__)

__all__ = [
    'FieldBinding',
    'RecordMapping',
    'Registry',
    'create_registry',
    'get_registry',
    'reset_registry',
]

_ZERO_TYPES = (bool, int, float, str, bytes, list, dict, set, tuple)


@dataclass(frozen=True)
class FieldBinding:
    """One mapped leaf field of an outer record type.

    `attrs` is the attribute path from the outer record to the leaf; the
    accessor pair walks it.
    """
    path: str
    column: str
    natural_type: type
    wire_type: type
    attrs: tuple[str, ...]
    nullable: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, '_getter', operator.attrgetter(self.path))

    def get(self, record: Any) -> Any:
        """Leaf value, None when an enclosing nested record is None."""
        if len(self.attrs) == 1:
            return self._getter(record)
        for name in self.attrs:
            if record is None:
                return None
            record = getattr(record, name)
        return record

    def set(self, record: Any, value: Any) -> None:
        for name in self.attrs[:-1]:
            record = getattr(record, name)
        setattr(record, self.attrs[-1], value)

    @property
    def substituted(self) -> bool:
        return self.wire_type is not self.natural_type


@dataclass
class RecordMapping:
    """All bindings of one outer record type."""
    record_type: type
    columns: dict[str, FieldBinding]
    fields: dict[str, FieldBinding]
    order: tuple[str, ...]
    factory: Callable[[], Any]

    def by_column(self, column: str) -> FieldBinding | None:
        return self.columns.get(column)

    def by_field(self, path: str) -> FieldBinding:
        try:
            return self.fields[path]
        except KeyError:
            raise UnknownFieldError(self.record_type, path) from None

    def new(self) -> Any:
        """Allocate a zero-valued record instance."""
        return self.factory()


def _unwrap(annotation: Any) -> tuple[Any, bool]:
    """Strip Optional/None unions, returning (type, nullable)."""
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        nullable = len(args) != len(typing.get_args(annotation))
        if len(args) == 1:
            inner, _ = _unwrap(args[0])
            return inner, nullable
        return annotation, nullable
    if origin is typing.Annotated:
        return _unwrap(typing.get_args(annotation)[0])
    return annotation, False


def _natural_type(annotation: Any) -> tuple[type, bool]:
    """Resolve a field annotation to its natural runtime type."""
    inner, nullable = _unwrap(annotation)
    origin = typing.get_origin(inner)
    if isinstance(origin, type):
        return origin, nullable
    if isinstance(inner, type):
        return inner, nullable
    return object, nullable


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        logger.warning(f'Could not resolve annotations of {cls.__qualname__}: {e}')
        return {f.name: f.type for f in fields(cls)}


def _zero_factory(cls: type, options: MappingOptions) -> Callable[[], Any]:
    """Build a callable allocating a zero-valued instance of dataclass `cls`.

    Fields with defaults keep them; required fields get the zero value of
    their annotation. Walked nested records are always allocated, even when
    annotated Optional, so their leaves can be bound.
    """
    hints = _type_hints(cls)
    required: list[tuple[str, Callable[[], Any]]] = []
    nested: list[tuple[str, Callable[[], Any]]] = []
    for f in fields(cls):
        natural, nullable = _natural_type(hints.get(f.name, f.type))
        record = _is_record(natural, options.leaf_types)
        walked = record and not f.name.startswith('_') and not column_for_field(f, options)[1]
        if walked:
            nested.append((f.name, _zero_factory(natural, options)))
        if not f.init:
            continue
        if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        if walked:
            zero = nested[-1][1]
        elif nullable:
            zero = type(None)
        elif record:
            zero = _zero_factory(natural, options)
        elif issubclass(natural, _ZERO_TYPES):
            zero = natural
        else:
            zero = type(None)
        required.append((f.name, zero))

    def factory() -> Any:
        instance = cls(**{name: zero() for name, zero in required})
        for name, zero in nested:
            if getattr(instance, name, None) is None:
                setattr(instance, name, zero())
        return instance

    return factory


def _is_record(tp: Any, leaf_types: tuple) -> bool:
    return (isinstance(tp, type) and dataclasses.is_dataclass(tp)
            and not issubclass(tp, leaf_types))


class Registry:
    """Mapping registry.

    Args:
        options: MappingOptions, defaults apply when None
    """

    def __init__(self, options: MappingOptions | None = None) -> None:
        self.options = options or MappingOptions()
        self._mappings: dict[type, RecordMapping] = {}
        self._substitutions = TypeSubstitutionTable()
        self._sealed = False
        self._owner = threading.get_ident()

    def __repr__(self) -> str:
        state = 'sealed' if self._sealed else 'open'
        return f'Registry({len(self._mappings)} types, {state})'

    def __contains__(self, record_type: Any) -> bool:
        return as_type(record_type) in self._mappings

    def __len__(self) -> int:
        return len(self._mappings)

    def __iter__(self) -> Iterator[type]:
        return iter(self._mappings)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        """Freeze the registry. Idempotent."""
        if not self._sealed:
            self._sealed = True
            logger.info(f'Sealed mapping registry with {len(self._mappings)} record types')

    def _check_writable(self, operation: str) -> None:
        if self._sealed:
            raise RegistrationSealedError(f'{operation}: registry is sealed')
        if threading.get_ident() != self._owner:
            raise ConcurrentRegistrationError(
                f'{operation}: must be called from the thread that created the registry')

    # Registration

    def register(self, *records: Any) -> None:
        """Register record types.

        Args:
            records: Dataclass types or (zero-valued) instances

        Raises
            BadShapeError: If a record is not a dataclass
            DuplicateTypeError: If a record type is already registered
            DuplicateColumnError: If two fields resolve to the same column
            BadTagError: If a column override is empty or not lowercase
        """
        self._check_writable('register')
        for record in records:
            cls = as_type(record)
            if not _is_record(cls, self.options.leaf_types):
                raise BadShapeError(cls)
            if cls in self._mappings:
                raise DuplicateTypeError(cls)
            mapping = RecordMapping(
                record_type=cls,
                columns={},
                fields={},
                order=(),
                factory=cls,
                )
            order: list[str] = []
            self._walk(mapping, cls, (), order, (cls,))
            mapping.order = tuple(order)
            mapping.factory = _zero_factory(cls, self.options)
            self._mappings[cls] = mapping
            logger.debug(f'Mapped {cls.__qualname__}: {list(mapping.columns)}')

    def _walk(self, mapping: RecordMapping, cls: type, prefix: tuple[str, ...],
              order: list[str], stack: tuple[type, ...]) -> None:
        """Depth-first walk of the public fields of `cls`."""
        hints = _type_hints(cls)
        for f in fields(cls):
            if f.name.startswith('_'):
                continue
            attrs = (*prefix, f.name)
            path = '.'.join(attrs)
            try:
                column, explicit = column_for_field(f, self.options)
            except BadTagError as e:
                raise BadTagError(f'{mapping.record_type.__qualname__}.{path}', e.column) from None
            annotation = hints.get(f.name, f.type)
            if isinstance(annotation, str):
                raise BadShapeError(cls, f'field {f.name!r}: unresolved annotation {annotation!r}')
            natural, nullable = _natural_type(annotation)
            if not explicit and _is_record(natural, self.options.leaf_types):
                if natural in stack:
                    raise BadShapeError(natural)
                self._walk(mapping, natural, attrs, order, (*stack, natural))
                continue
            if column in mapping.columns:
                raise DuplicateColumnError(mapping.record_type, column, path)
            binding = FieldBinding(
                path=path,
                column=column,
                natural_type=natural,
                wire_type=self._substitutions.resolve(natural),
                attrs=attrs,
                nullable=nullable,
                )
            mapping.columns[column] = binding
            mapping.fields[path] = binding
            order.append(path)

    def substitute(self, natural: Any, wire: Any) -> None:
        """Read and write `natural` typed fields through wire type `wire`.

        Entries already registered are rewritten, so the order of `register`
        and `substitute` calls does not matter.

        Raises
            DuplicateSubstitutionError: If natural type already substituted
            BadSubstitutionError: If wire type is not compatible
        """
        self._check_writable('substitute')
        natural, wire = self._substitutions.add(natural, wire)
        rewritten = 0
        for mapping in self._mappings.values():
            for path, binding in mapping.fields.items():
                if binding.wire_type is natural:
                    binding = dataclasses.replace(binding, wire_type=wire)
                    mapping.fields[path] = binding
                    mapping.columns[binding.column] = binding
                    rewritten += 1
        if rewritten:
            logger.debug(f'Rewrote {rewritten} entries from {natural.__qualname__} '
                         f'to {wire.__qualname__}')

    # Lookup

    def mapping(self, record_type: Any) -> RecordMapping:
        """Get the mapping of a registered record type.

        Raises
            UnmappedTypeError: If the type was never registered
        """
        cls = as_type(record_type)
        try:
            return self._mappings[cls]
        except KeyError:
            raise UnmappedTypeError(cls) from None

    def is_registered(self, record_type: Any) -> bool:
        return record_type in self

    def binding_for_column(self, record_type: Any, column: str) -> FieldBinding | None:
        return self.mapping(record_type).by_column(column.lower())

    def binding_for_field(self, record_type: Any, path: str) -> FieldBinding:
        return self.mapping(record_type).by_field(path)

    def default_fields(self, record_type: Any) -> tuple[str, ...]:
        return self.mapping(record_type).order

    def columns(self, record_type: Any) -> list[str]:
        """Column names of a record type in default field order.
        """
        mapping = self.mapping(record_type)
        return [mapping.fields[path].column for path in mapping.order]

    def zero(self, record_type: Any) -> Any:
        """Allocate a zero-valued instance of a registered record type.
        """
        return self.mapping(record_type).new()


@load_options(cls=MappingOptions)
def create_registry(options: MappingOptions | dict[str, Any] | str,
                    config: Any | None = None, **kw: Any) -> Registry:
    """Create a registry from options

    Args:
        options: Can be:
                - MappingOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        Empty, unsealed Registry
    """
    if isinstance(options, MappingOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=MappingOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)
    return Registry(options)


_default_registry: Registry | None = None
_default_registry_lock = threading.RLock()


def get_registry() -> Registry:
    """Get the process-wide default registry."""
    global _default_registry
    if _default_registry is None:
        with _default_registry_lock:
            if _default_registry is None:
                _default_registry = Registry()
    return _default_registry


def reset_registry(options: MappingOptions | None = None) -> Registry:
    """Replace the process-wide default registry with an empty one."""
    global _default_registry
    with _default_registry_lock:
        _default_registry = Registry(options)
    return _default_registry
