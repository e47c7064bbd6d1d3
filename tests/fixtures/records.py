"""
Record types and registries shared by the tests.

Usage:
    def test_columns(mapped_registry):
        assert mapped_registry.columns(Item) == ['id', 'name']
"""
import datetime
import json
from dataclasses import dataclass, field

import pytest
from dbmap.registry import Registry


@dataclass
class Item:
    ID: int = field(default=0, metadata={'db': 'col=id'})
    Name: str = ''


@dataclass
class Address:
    City: str = ''
    Zip: str = field(default='', metadata={'db': 'col=zip_code'})


@dataclass
class Person:
    ID: int = field(default=0, metadata={'db': 'col=id'})
    Name: str = ''
    Addr: Address = field(default_factory=Address)
    Born: datetime.datetime | None = None
    Tags: list = field(default_factory=list)
    _secret: str = ''


@dataclass
class Left:
    A: int = 0
    B: int = 0


@dataclass
class Right:
    C: int = field(default=0, metadata={'db': 'col=a'})


@dataclass
class Order:
    ID: int = field(default=0, metadata={'db': 'col=order_id'})
    Total: float = 0.0
    Paid: bool = False


@dataclass
class Required:
    """Record without defaults; decoding allocates zero values."""
    ID: int
    Name: str
    Where: Address
    Note: str | None


@dataclass
class Contact:
    """Optional nested record, still walked and allocated on decode."""
    Name: str = ''
    Home: Address | None = None


@dataclass
class Boxed:
    """Nested record excluded from __init__ and without a default."""
    ID: int = field(default=0, metadata={'db': 'col=id'})
    Addr: Address = field(init=False)


@dataclass
class Node:
    Value: int = 0
    Next: 'Node | None' = None


class JsonList(list):
    """Wire type storing a list as JSON text."""

    @classmethod
    def from_wire(cls, value):
        return cls(json.loads(value))

    def to_wire(self):
        return json.dumps(list(self))


class Money(float):
    """Wire type for amounts stored as integer cents."""

    @classmethod
    def from_wire(cls, value):
        return cls(value / 100)

    def to_wire(self):
        return round(self * 100)


@pytest.fixture
def registry():
    """Empty, unsealed registry."""
    return Registry()


@pytest.fixture
def mapped_registry():
    """Registry with the common record types and JSON lists registered."""
    reg = Registry()
    reg.register(Item, Person, Left, Right, Order, Contact)
    reg.substitute(list, JsonList)
    return reg
