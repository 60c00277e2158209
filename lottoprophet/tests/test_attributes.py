import pytest

from lottoprophet.errors import RegistryError
from lottoprophet.utilities import attributes as attrs


@pytest.mark.parametrize("table", [attrs.ZODIAC_TABLE, attrs.WAVE_TABLE, attrs.ELEMENT_TABLE])
def test_tables_partition_1_to_49(table):
    seen = [n for group in table.values() for n in group]
    assert sorted(seen) == list(attrs.NUMBERS)


def test_zodiac_and_wave_shape():
    assert len(attrs.ZODIAC_ORDER) == 12
    assert attrs.zodiac_of(1) == attrs.zodiac_of(49) == "snake"
    assert sorted(len(v) for v in attrs.WAVE_TABLE.values()) == [16, 16, 17]


def test_number_attributes():
    a = attrs.attributes_of(37)
    assert (a.head, a.tail) == (3, 7)
    assert a.prime and a.odd
    assert a.cluster == 5
    assert attrs.group_key("tail", 40) == 0
    assert 40 in attrs.members("tail", 0)


def test_invert_rejects_duplicates():
    table = {"a": list(range(1, 50)), "b": [3]}
    with pytest.raises(RegistryError):
        attrs._invert("test", table)


def test_invert_rejects_gaps():
    with pytest.raises(RegistryError):
        attrs._invert("test", {"a": list(range(1, 49))})


def test_element_of_and_describe():
    assert attrs.element_of(4) == "metal"
    assert attrs.element_of(49) == "fire"
    described = attrs.describe_numbers([1, 2])
    assert described == {"zodiac": ["snake", "dragon"], "wave": ["red", "red"], "element": ["water", "fire"]}
