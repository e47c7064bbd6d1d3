"""
Field mapping between record types and table columns.

Declare once, at startup, how dataclass records map to table columns, then
decode query results into records and render records into SQL value
fragments.

All operations can be called either as:
- Module functions over the default registry: dbmap.register(Item)
- Methods of an explicit Registry, Decoder and Builder

Registration must finish before the first decode/build call, which seals the
registry.
"""
__version__ = '0.1.0'

from typing import Any

from dbmap.builder import Builder, Mode
from dbmap.decoder import Decoder, Destination, into
from dbmap.exceptions import BadDestinationShapeError, BadShapeError
from dbmap.exceptions import BadSubstitutionError, BadTagError, BuildError
from dbmap.exceptions import CannotRenderError, ConcurrentRegistrationError
from dbmap.exceptions import CursorError, DecodeError, DecodeErrors
from dbmap.exceptions import DuplicateColumnError, DuplicateSubstitutionError
from dbmap.exceptions import DuplicateTypeError, EmptySequenceError
from dbmap.exceptions import LookupErrors, LookupMappingError, MappingError
from dbmap.exceptions import MixedSequenceError, NilElementError
from dbmap.exceptions import NoDestinationsError, RegistrationError
from dbmap.exceptions import RegistrationErrors, RegistrationSealedError
from dbmap.exceptions import RenderErrors, RowDecodeError, UnknownFieldError
from dbmap.exceptions import UnmappedColumnError, UnmappedTypeError
from dbmap.options import MappingOptions
from dbmap.registry import Registry, create_registry, get_registry
from dbmap.registry import reset_registry
from dbmap.wire import DecodableFromWire, EncodableToWire


def register(*records: Any) -> None:
    """Register record types (dataclasses or instances) in the default registry.
    """
    get_registry().register(*records)


def substitute(natural: Any, wire: Any) -> None:
    """Read and write `natural` typed fields through wire type `wire`.
    """
    get_registry().substitute(natural, wire)


def seal() -> None:
    """Seal the default registry; later registration raises.
    """
    get_registry().seal()


def columns(record_type: Any) -> list[str]:
    """Mapped column names of a record type in default field order.
    """
    return get_registry().columns(record_type)


def decode(cursor: Any, *dest: Any) -> list[list]:
    """Decode the cursor's current result set into destinations.

    Seals the default registry.
    """
    return Decoder(get_registry()).decode(cursor, *dest)


scan = decode


def build(data: Any, *fields: str, mode: Mode | None = None) -> str:
    """Render records into a VALUES tuple list or a SET assignment list.

    Seals the default registry.
    """
    return Builder(get_registry()).build(data, *fields, mode=mode)


buildstr = build


__all__ = [
    'register',
    'substitute',
    'seal',
    'columns',
    'decode',
    'scan',
    'build',
    'buildstr',
    'into',
    'Destination',
    'Registry',
    'Decoder',
    'Builder',
    'Mode',
    'MappingOptions',
    'create_registry',
    'get_registry',
    'reset_registry',
    'DecodableFromWire',
    'EncodableToWire',
    'MappingError',
    'RegistrationError',
    'BadShapeError',
    'DuplicateTypeError',
    'DuplicateColumnError',
    'BadTagError',
    'BadSubstitutionError',
    'DuplicateSubstitutionError',
    'RegistrationSealedError',
    'ConcurrentRegistrationError',
    'LookupMappingError',
    'UnmappedColumnError',
    'UnmappedTypeError',
    'UnknownFieldError',
    'DecodeError',
    'RowDecodeError',
    'CursorError',
    'BadDestinationShapeError',
    'NoDestinationsError',
    'BuildError',
    'CannotRenderError',
    'NilElementError',
    'EmptySequenceError',
    'MixedSequenceError',
    'RegistrationErrors',
    'LookupErrors',
    'DecodeErrors',
    'RenderErrors',
]
