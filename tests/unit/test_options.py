import datetime

import pytest
from dbmap.options import MappingOptions
from dbmap.registry import Registry, create_registry


def test_init_defaults():
    """Test default initialization"""
    options = MappingOptions()

    assert options.tag == 'db'
    assert options.key == 'col'
    assert options.separator == '='
    assert options.quote == '"'
    assert options.skip_unrenderable_defaults is False
    assert datetime.datetime in options.leaf_types
    assert datetime.date in options.leaf_types


def test_leaf_types_normalized_to_tuple():
    """Test leaf types given as a list are stored as a tuple"""
    options = MappingOptions(leaf_types=[datetime.datetime])
    assert options.leaf_types == (datetime.datetime,)


@pytest.mark.parametrize('kwargs', [
    {'tag': ''},
    {'key': ''},
    {'separator': ''},
    {'separator': ' = '},
    {'quote': ''},
    {'quote': '""'},
])
def test_validation(kwargs):
    """Test validation rules"""
    with pytest.raises(ValueError):
        MappingOptions(**kwargs)


def test_create_registry_from_options():
    """Test registry creation from an options object"""
    options = MappingOptions(tag='sql')
    registry = create_registry(options)

    assert isinstance(registry, Registry)
    assert registry.options.tag == 'sql'
    assert not registry.sealed


def test_create_registry_from_dict():
    """Test registry creation from a dictionary of options"""
    registry = create_registry({'tag': 'sql', 'quote': "'"})

    assert registry.options.tag == 'sql'
    assert registry.options.quote == "'"
    assert registry.options.key == 'col'
