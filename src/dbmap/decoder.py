"""
Decode query result sets into record collections.

Convention:
- Each destination is a registered record type, optionally with a
  caller-owned list to fill (`into(Item, items)`).
- SELECT columns are listed table by table in destination order. A column
  named '' marks a table boundary; without it, a column name shared at the
  junction of two tables binds to the earlier table.

Columns are resolved against the registry once per call; rows are then bound
positionally without further lookups.
"""
import dataclasses
import datetime
import logging
import numbers
from collections.abc import Callable, Iterator, Mapping, MutableSequence
from dataclasses import dataclass, field
from typing import Any

import dateutil.parser
from dbmap.exceptions import BadDestinationShapeError, CursorError
from dbmap.exceptions import NoDestinationsError, RowDecodeError
from dbmap.exceptions import UnmappedColumnError
from dbmap.registry import FieldBinding, RecordMapping, Registry
from dbmap.wire import is_decodable

logger = logging.getLogger(__name__)

__all__ = [
    'Decoder',
    'Destination',
    'into',
    'column_names',
    'plan_columns',
]

DEFAULT_CHUNK_SIZE = 5000

_TRUE = {'1', 't', 'true', 'y', 'yes', 'on'}
_FALSE = {'0', 'f', 'false', 'n', 'no', 'off'}


@dataclass
class Destination:
    """A record type plus the caller-owned list that receives its records."""
    record_type: type
    rows: MutableSequence = field(default_factory=list)


def into(record_type: type, rows: MutableSequence | None = None) -> Destination:
    """Destination filling `rows` with decoded `record_type` instances.
    """
    return Destination(record_type, [] if rows is None else rows)


# Value conversion, database primitive -> natural field type

def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
    raise ValueError(f'cannot convert {value!r} to bool')


def _to_int(value: Any) -> int:
    if isinstance(value, numbers.Number) and not isinstance(value, int):
        integral = int(value)
        if integral != value:
            raise ValueError(f'cannot convert {value!r} to int without loss')
        return integral
    if isinstance(value, bytes):
        value = value.decode()
    return int(value)


def _to_str(value: Any) -> str:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).decode()
    return str(value)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode()
    return bytes(value)


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, bytes):
        value = value.decode()
    return dateutil.parser.isoparse(value)


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, bytes):
        value = value.decode()
    return dateutil.parser.isoparse(value).date()


def _to_time(value: Any) -> datetime.time:
    if isinstance(value, datetime.time):
        return value
    if isinstance(value, datetime.datetime):
        return value.time()
    if isinstance(value, bytes):
        value = value.decode()
    return dateutil.parser.isoparser().parse_isotime(value)


_CONVERTERS: dict[type, Callable[[Any], Any]] = {
    bool: _to_bool,
    int: _to_int,
    float: float,
    str: _to_str,
    bytes: _to_bytes,
    datetime.datetime: _to_datetime,
    datetime.date: _to_date,
    datetime.time: _to_time,
}


def _converter(binding: FieldBinding) -> Callable[[Any], Any]:
    """Pick the conversion applied to every value bound to `binding`.

    NULL passes through to wire types, unconverted kinds and Optional fields;
    into any other scalar or temporal field it fails the row.
    """
    kind = binding.wire_type
    if is_decodable(kind):
        decode = kind.from_wire
        return lambda value: None if value is None else decode(value)
    convert = _CONVERTERS.get(kind)
    if convert is None:
        return lambda value: value

    def coerce(value: Any) -> Any:
        if value is None:
            if binding.nullable:
                return None
            raise ValueError(f'NULL into non-nullable {kind.__name__} field {binding.path!r}')
        if type(value) is kind:
            return value
        return convert(value)

    return coerce


@dataclass(frozen=True)
class _Slot:
    """Resolved target of one result column. `binding` None discards."""
    dest: int
    column: str
    binding: FieldBinding | None = None
    convert: Callable[[Any], Any] | None = None


def column_names(cursor: Any) -> list[str]:
    """Column names of the cursor's current result set.

    Raises
        CursorError: If the cursor has no result set
    """
    description = getattr(cursor, 'description', None)
    if description is None:
        raise CursorError('cursor has no result set')
    return [getattr(d, 'name', None) or (d[0] if d else '') or '' for d in description]


def _normalize(column: str) -> str:
    """Strip a 'table.' qualifier and case-fold."""
    _, _, name = column.rpartition('.')
    return name.lower()


def plan_columns(columns: list[str], mappings: list[RecordMapping]) -> list[_Slot]:
    """Bind each result column to a destination field.

    An empty column advances to the next destination. A column missing from
    the current destination must be found in the next one; the decoder never
    skips more than one destination per column.

    Raises
        UnmappedColumnError: If a column cannot be bound
    """
    slots: list[_Slot] = []
    j = 0
    for raw in columns:
        if raw == '':
            j += 1
            if j == len(mappings):
                raise UnmappedColumnError(raw, mappings[-1].record_type)
            slots.append(_Slot(dest=j, column=raw))
            continue
        column = _normalize(raw)
        binding = mappings[j].by_column(column)
        if binding is None:
            if j + 1 == len(mappings):
                raise UnmappedColumnError(column, mappings[j].record_type)
            j += 1
            binding = mappings[j].by_column(column)
            if binding is None:
                raise UnmappedColumnError(column, mappings[j].record_type)
        slots.append(_Slot(dest=j, column=column, binding=binding, convert=_converter(binding)))
    return slots


def _iter_rows(cursor: Any, size: int) -> Iterator[Any]:
    """Iterate the cursor in chunks; cursor failures surface as CursorError."""
    fetchmany = getattr(cursor, 'fetchmany', None)
    try:
        if fetchmany is None:
            yield from cursor
            return
        while True:
            chunk = fetchmany(size)
            if not chunk:
                break
            yield from chunk
    except CursorError:
        raise
    except Exception as e:
        raise CursorError(f'cursor failed: {e}') from e


def _row_values(row: Any) -> tuple:
    if isinstance(row, Mapping):
        return tuple(row.values())
    return tuple(row)


class Decoder:
    """Result decoder bound to a registry.

    Creating a decoder seals the registry.
    """

    def __init__(self, registry: Registry, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        registry.seal()
        self.registry = registry
        self.chunk_size = chunk_size

    def _destinations(self, dest: tuple) -> list[Destination]:
        if not dest:
            raise NoDestinationsError('no dest argument')
        destinations = []
        for i, d in enumerate(dest):
            if isinstance(d, type):
                d = Destination(d, [])
            if (not isinstance(d, Destination) or not isinstance(d.record_type, type)
                    or not isinstance(d.rows, MutableSequence)):
                raise BadDestinationShapeError(i, d)
            if not dataclasses.is_dataclass(d.record_type):
                raise BadDestinationShapeError(i, d)
            destinations.append(d)
        return destinations

    def decode(self, cursor: Any, *dest: Any) -> list[MutableSequence]:
        """Decode all rows of the cursor's current result set.

        Args:
            cursor: DB-API cursor with an executed query; not closed here
            dest: Destinations in SELECT column order; each a registered
                record type or `into(RecordType, rows)`

        Returns
            List of row lists, one per destination. Caller supplied lists
            are filled in place, replacing their previous contents.

        Raises
            NoDestinationsError: If no destination is given
            BadDestinationShapeError: If a destination is malformed
            UnmappedTypeError: If a destination type is not registered
            UnmappedColumnError: If a column cannot be bound
            RowDecodeError: If a row value cannot be bound to its field
            CursorError: If the cursor fails while fetching
        """
        destinations = self._destinations(dest)
        mappings = [self.registry.mapping(d.record_type) for d in destinations]
        columns = column_names(cursor)
        slots = plan_columns(columns, mappings)
        bound = sorted({s.dest for s in slots if s.binding is not None})
        logger.debug(f'Decoding {len(columns)} columns into '
                     f'{[m.record_type.__qualname__ for m in mappings]}')

        results: list[list] = [[] for _ in destinations]
        width = len(slots)
        count = 0
        for count, row in enumerate(_iter_rows(cursor, self.chunk_size), 1):
            values = _row_values(row)
            if len(values) != width:
                raise RowDecodeError(count, '', f'expected {width} values, got {len(values)}')
            try:
                records = {i: mappings[i].new() for i in bound}
            except Exception as e:
                raise RowDecodeError(count, '', f'cannot allocate record: {e}') from e
            for slot, value in zip(slots, values):
                if slot.binding is None:
                    continue
                try:
                    slot.binding.set(records[slot.dest], slot.convert(value))
                except Exception as e:
                    raise RowDecodeError(count, slot.column, str(e)) from e
            for i, record in records.items():
                results[i].append(record)
        logger.debug(f'Decoded {count} rows')

        for d, rows in zip(destinations, results):
            d.rows.clear()
            d.rows.extend(rows)
        return [d.rows for d in destinations]
