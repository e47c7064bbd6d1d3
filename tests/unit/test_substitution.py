"""
Tests for natural type to wire type substitution.
"""
import json

import pytest
from dbmap.exceptions import BadSubstitutionError, DuplicateSubstitutionError
from dbmap.registry import Registry
from dbmap.wire import DecodableFromWire, EncodableToWire, TypeSubstitutionTable
from dbmap.wire import encode_value, is_wire_type
from tests.fixtures.records import Item, JsonList, Money, Order, Person


class DecodeOnly(list):
    @classmethod
    def from_wire(cls, value):
        return cls(json.loads(value))


class EncodeOnly(list):
    def to_wire(self):
        return json.dumps(self)


class TestWireCapabilities:

    def test_protocols(self):
        """Test both capabilities are detected on wire types"""
        assert isinstance(JsonList, DecodableFromWire)
        assert isinstance(JsonList([1]), EncodableToWire)
        assert is_wire_type(JsonList)
        assert not is_wire_type(list)
        assert not is_wire_type(DecodeOnly)
        assert not is_wire_type(EncodeOnly)

    def test_encode_value_converts_natural_value(self):
        assert encode_value(JsonList, ['a', 1]) == '["a", 1]'
        assert encode_value(JsonList, JsonList([2])) == '[2]'
        assert encode_value(Money, 1.25) == 125


class TestTypeSubstitutionTable:

    def test_add_and_resolve(self):
        table = TypeSubstitutionTable()
        assert table.add(list, JsonList) == (list, JsonList)

        assert list in table
        assert len(table) == 1
        assert table.resolve(list) is JsonList
        assert table.resolve(str) is str

    def test_add_from_samples(self):
        """Test zero-valued samples stand in for types"""
        table = TypeSubstitutionTable()
        table.add([], JsonList())
        assert table.resolve(list) is JsonList

    def test_duplicate(self):
        table = TypeSubstitutionTable()
        table.add(list, JsonList)
        with pytest.raises(DuplicateSubstitutionError) as exc_info:
            table.add(list, JsonList)
        assert exc_info.value.natural is list

    @pytest.mark.parametrize(('natural', 'wire'), [
        (dict, JsonList),
        (list, DecodeOnly),
        (list, EncodeOnly),
        (float, JsonList),
    ])
    def test_incompatible(self, natural, wire):
        """Test wire types must share the natural representation and capabilities"""
        with pytest.raises(BadSubstitutionError):
            TypeSubstitutionTable().add(natural, wire)


class TestRegistrySubstitution:

    def test_substitute_before_register(self, registry):
        registry.substitute(list, JsonList)
        registry.register(Person)

        binding = registry.binding_for_field(Person, 'Tags')
        assert binding.natural_type is list
        assert binding.wire_type is JsonList
        assert binding.substituted

    def test_substitute_after_register_rewrites_entries(self, registry):
        """Test entries built before the substitution are rewritten"""
        registry.register(Person, Order)
        registry.substitute(list, JsonList)
        registry.substitute(float, Money)

        assert registry.binding_for_field(Person, 'Tags').wire_type is JsonList
        assert registry.binding_for_column(Person, 'tags').wire_type is JsonList
        assert registry.binding_for_field(Order, 'Total').wire_type is Money
        assert registry.binding_for_column(Order, 'total').wire_type is Money

    def test_registration_order_is_irrelevant(self, registry):
        """Test both orders produce identical bindings"""
        other = Registry()
        registry.register(Person)
        registry.substitute(list, JsonList)
        other.substitute(list, JsonList)
        other.register(Person)

        assert registry.mapping(Person).fields == other.mapping(Person).fields
        assert registry.mapping(Person).columns == other.mapping(Person).columns

    def test_unrelated_entries_untouched(self, registry):
        registry.register(Item, Person)
        registry.substitute(list, JsonList)

        assert registry.binding_for_field(Item, 'Name').wire_type is str
        assert not registry.binding_for_field(Person, 'Name').substituted

    def test_duplicate_substitution(self, registry):
        registry.substitute(list, JsonList)
        with pytest.raises(DuplicateSubstitutionError):
            registry.substitute(list, JsonList)
