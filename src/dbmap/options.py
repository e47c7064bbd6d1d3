import datetime
from dataclasses import dataclass

from libb import ConfigOptions

__all__ = [
    'MappingOptions',
    'DEFAULT_LEAF_TYPES',
]

DEFAULT_LEAF_TYPES = (datetime.datetime, datetime.date, datetime.time)


@dataclass
class MappingOptions(ConfigOptions):
    """Options

    Attribute syntax: `metadata={'db': 'col=name other=value'}` where `db`
    is `tag`, `col` is `key` and `=` is `separator`.

    - leaf_types: types never walked as nested records (default: temporal types)
    - skip_unrenderable_defaults: skip fields with no literal form when
      rendering the default field set instead of raising (default: False)
    - quote: quote character for text literals (default: double quote)
    """
    tag: str = 'db'
    key: str = 'col'
    separator: str = '='
    leaf_types: tuple = DEFAULT_LEAF_TYPES
    skip_unrenderable_defaults: bool = False
    quote: str = '"'

    def __post_init__(self):
        for name in ('tag', 'key', 'separator'):
            value = getattr(self, name)
            if not value or not isinstance(value, str):
                raise ValueError(f'{name} must be a non-empty string')
        if any(c.isspace() for c in self.separator):
            raise ValueError('separator must not contain whitespace')
        if len(self.quote) != 1:
            raise ValueError('quote must be a single character')
        self.leaf_types = tuple(self.leaf_types)
