"""
Mapping-specific exception classes.
"""


def _type_name(record_type) -> str:
    return getattr(record_type, '__qualname__', None) or repr(record_type)


class MappingError(Exception):
    """Base class for all dbmap errors.
    """


# Registration errors: raised while building the registry at startup

class RegistrationError(MappingError):
    """Error while registering record types or type substitutions.
    """


class BadShapeError(RegistrationError):
    """Registered value is not a record (dataclass) type.
    """

    def __init__(self, record_type, reason: str = 'is not a record type') -> None:
        self.record_type = record_type
        self.reason = reason
        super().__init__(f'{_type_name(record_type)!r} {reason}')


class DuplicateTypeError(RegistrationError):
    """Record type registered twice.
    """

    def __init__(self, record_type) -> None:
        self.record_type = record_type
        super().__init__(f'{_type_name(record_type)!r} already mapped')


class DuplicateColumnError(RegistrationError):
    """Two fields of one record type resolve to the same column.
    """

    def __init__(self, record_type, column: str, field: str) -> None:
        self.record_type = record_type
        self.column = column
        self.field = field
        super().__init__(
            f'{_type_name(record_type)!r} duplicate column map {column!r} (field {field!r})')


class BadTagError(RegistrationError):
    """Column override is empty or not lowercase.
    """

    def __init__(self, field: str, column: str) -> None:
        self.field = field
        self.column = column
        super().__init__(f'{field} bad tagged column {column!r}')


class BadSubstitutionError(RegistrationError):
    """Wire type cannot stand in for the natural type.
    """

    def __init__(self, natural, wire, reason: str) -> None:
        self.natural = natural
        self.wire = wire
        super().__init__(f'cannot substitute {_type_name(wire)!r} for {_type_name(natural)!r}: {reason}')


class DuplicateSubstitutionError(RegistrationError):
    """Natural type already has a wire type.
    """

    def __init__(self, natural) -> None:
        self.natural = natural
        super().__init__(f'type {_type_name(natural)!r} already mapped')


class RegistrationSealedError(RegistrationError):
    """Registration attempted after the registry was sealed.
    """


class ConcurrentRegistrationError(RegistrationError):
    """Registration attempted from a thread other than the owning one.
    """


# Mapping errors: lookups against a sealed registry

class LookupMappingError(MappingError):
    """Error resolving a column, field or type against the registry.
    """


class UnmappedColumnError(LookupMappingError):
    """Result column has no mapping in the current or next destination.
    """

    def __init__(self, column: str, record_type=None) -> None:
        self.column = column
        self.record_type = record_type
        where = f' in {_type_name(record_type)!r}' if record_type is not None else ''
        super().__init__(f'column {column!r} has no mapping{where}')


class UnmappedTypeError(LookupMappingError):
    """Record type was never registered.
    """

    def __init__(self, record_type) -> None:
        self.record_type = record_type
        super().__init__(f'{_type_name(record_type)!r} has no mapping')


class UnknownFieldError(LookupMappingError):
    """Explicit field path is not mapped for the record type.
    """

    def __init__(self, record_type, field: str) -> None:
        self.record_type = record_type
        self.field = field
        super().__init__(f'{_type_name(record_type)!r} has no field {field!r}')


# Decode errors

class DecodeError(MappingError):
    """Error decoding a result set into records.
    """


class RowDecodeError(DecodeError):
    """A row could not be bound to its destination fields.
    """

    def __init__(self, row: int, column: str, reason: str) -> None:
        self.row = row
        self.column = column
        super().__init__(f'row {row} column {column!r}: {reason}')


class CursorError(DecodeError):
    """The result cursor failed or has no result set.
    """


class BadDestinationShapeError(DecodeError):
    """Destination is not a growable container of records.
    """

    def __init__(self, index: int, destination) -> None:
        self.index = index
        self.destination = destination
        super().__init__(f'dest[{index}] is not a record destination: {destination!r}')


class NoDestinationsError(DecodeError):
    """Decode called without destinations.
    """


# Render errors

class BuildError(MappingError):
    """Error rendering records into SQL value fragments.
    """


class CannotRenderError(BuildError):
    """Value kind has no SQL literal form.
    """

    def __init__(self, field: str, value_type) -> None:
        self.field = field
        self.value_type = value_type
        super().__init__(f'{field}: type {_type_name(value_type)!r} cannot be valued')


class NilElementError(BuildError):
    """Sequence element is None.
    """

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f'data[{index}] is None')


class EmptySequenceError(BuildError):
    """Sequence input has no elements.
    """


class MixedSequenceError(BuildError):
    """Sequence elements are not all of one record type.
    """

    def __init__(self, index: int, expected, got) -> None:
        self.index = index
        self.expected = expected
        self.got = got
        super().__init__(
            f'data[{index}] is {_type_name(got)!r}, expected {_type_name(expected)!r}')


RegistrationErrors = (
    BadShapeError,
    DuplicateTypeError,
    DuplicateColumnError,
    BadTagError,
    BadSubstitutionError,
    DuplicateSubstitutionError,
    RegistrationSealedError,
    ConcurrentRegistrationError,
    )

LookupErrors = (
    UnmappedColumnError,
    UnmappedTypeError,
    UnknownFieldError,
    )

DecodeErrors = (
    RowDecodeError,
    CursorError,
    BadDestinationShapeError,
    NoDestinationsError,
    UnmappedColumnError,
    )

RenderErrors = (
    CannotRenderError,
    NilElementError,
    EmptySequenceError,
    MixedSequenceError,
    )
