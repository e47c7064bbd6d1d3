"""
Column name resolution from field attribute strings.

A field carries its attribute string in dataclass metadata under the
configured tag name, e.g. `field(metadata={'db': 'col=user_id'})`. Tokens are
whitespace separated `key=value` pairs; only the configured key is read.
"""
import dataclasses
import logging

from dbmap.exceptions import BadTagError
from dbmap.options import MappingOptions

logger = logging.getLogger(__name__)

__all__ = ['parse_column', 'column_for_field']


def parse_column(field_name: str, attribute: str | None, key: str = 'col',
                 separator: str = '=') -> tuple[str, bool]:
    """Resolve the column name for a field.

    Args:
        field_name: Attribute name of the field
        attribute: Raw attribute string, may be None or empty
        key: Recognised key inside the attribute string
        separator: Key/value separator

    Returns
        Tuple of (column name, whether an explicit override was found)

    Raises
        BadTagError: If the resolved column is empty or not lowercase
    """
    column, explicit = field_name.lower(), False
    for token in (attribute or '').split():
        name, sep, value = token.partition(separator)
        if sep and name == key:
            column, explicit = value, True
            break
    if not column or column.lower() != column:
        raise BadTagError(field_name, column)
    return column, explicit


def column_for_field(field: dataclasses.Field, options: MappingOptions) -> tuple[str, bool]:
    """Resolve the column name for a dataclass field using the configured tag.
    """
    attribute = field.metadata.get(options.tag) if field.metadata else None
    if attribute is not None and not isinstance(attribute, str):
        logger.debug(f'Ignoring non-string {options.tag!r} metadata on {field.name}')
        attribute = None
    return parse_column(field.name, attribute, options.key, options.separator)
