"""
Tests for the module-level functions over the default registry.
"""
import dbmap
import pytest
from dbmap.registry import get_registry
from tests.fixtures.records import Item, JsonList, Person


def test_register_decode_build(create_cursor):
    """Test the full cycle through module functions"""
    dbmap.register(Item)
    cursor = create_cursor(['id', 'name'], [(1, 'a'), (2, 'b')])
    items = []

    dbmap.decode(cursor, dbmap.into(Item, items))

    assert items == [Item(ID=1, Name='a'), Item(ID=2, Name='b')]
    assert dbmap.build(items) == '(id,name) VALUES (1,"a"),(2,"b")'
    assert dbmap.build(Item(ID=5, Name='x'), 'Name') == 'name="x"'


def test_decode_seals_default_registry(create_cursor):
    dbmap.register(Item)
    dbmap.decode(create_cursor(['id'], []), Item)

    assert get_registry().sealed
    with pytest.raises(dbmap.RegistrationSealedError):
        dbmap.register(Person)


def test_explicit_seal():
    dbmap.seal()
    with pytest.raises(dbmap.RegistrationError):
        dbmap.substitute(list, JsonList)


def test_columns():
    dbmap.substitute(list, JsonList)
    dbmap.register(Person)
    assert dbmap.columns(Person) == ['id', 'name', 'city', 'zip_code', 'born', 'tags']


def test_aliases():
    assert dbmap.scan is dbmap.decode
    assert dbmap.buildstr is dbmap.build


def test_error_groups():
    """Test errors can be caught by category"""
    with pytest.raises(dbmap.RegistrationErrors):
        dbmap.register(int)
    with pytest.raises(dbmap.LookupErrors):
        dbmap.build(Item())
    with pytest.raises(dbmap.RenderErrors):
        dbmap.build([])
    with pytest.raises(dbmap.MappingError):
        dbmap.decode(None)
