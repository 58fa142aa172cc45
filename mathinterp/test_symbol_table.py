import logging
from decimal import Decimal

import pytest

from mathinterp.errors import CalculatorError
from mathinterp.numeric import PRECISION_DIGITS
from mathinterp.symbol_table import BASE_CAPACITY, SymbolTable, fnv1a_hash


def test_fnv1a_reference_values():
    assert fnv1a_hash("") == 2166136261
    assert fnv1a_hash("a") == 0xE40C292C
    assert fnv1a_hash("foobar") == 0xBF9CF968


def test_insert_then_get():
    table = SymbolTable()
    stored = table.insert_or_update("a", Decimal(5))
    assert stored == 5
    assert table.get("a") == 5
    assert table.count == 1
    assert "a" in table


def test_update_in_place_keeps_count():
    table = SymbolTable()
    table.insert_or_update("a", Decimal(5))
    table.insert_or_update("a", Decimal(6))
    assert table.get("a") == 6
    assert table.count == 1


def test_names_are_case_sensitive():
    table = SymbolTable()
    table.insert_or_update("x", Decimal(1))
    table.insert_or_update("X", Decimal(2))
    assert table.get("x") == 1
    assert table.get("X") == 2
    assert len(table) == 2


def test_get_missing_returns_none_and_warns(caplog):
    table = SymbolTable()
    with caplog.at_level(logging.WARNING, logger="mathinterp.symbol_table"):
        assert table.get("nope") is None
    assert "Undefined variable: 'nope'" in caplog.text


def test_stored_value_is_rounded_to_precision():
    table = SymbolTable()
    long_value = Decimal("1." + "3" * 120)
    stored = table.insert_or_update("x", long_value)
    assert len(stored.as_tuple().digits) == PRECISION_DIGITS


def test_resize_doubles_once_and_keeps_every_name():
    table = SymbolTable()
    assert table.capacity == BASE_CAPACITY
    capacities = []
    for i in range(50):
        table.insert_or_update(f"v{i}", Decimal(i))
        capacities.append(table.capacity)
    # 39 > 64 * 0.6 triggers the only resize in this range
    assert capacities[37] == 64
    assert capacities[38] == 128
    assert len(set(capacities)) == 2
    assert table.count == 50
    for i in range(50):
        assert table.get(f"v{i}") == i


def test_updates_do_not_trigger_resize():
    table = SymbolTable()
    for i in range(38):
        table.insert_or_update(f"v{i}", Decimal(i))
    for _ in range(10):
        table.insert_or_update("v0", Decimal(1))
    assert table.capacity == 64
    assert table.count == 38


def test_values_survive_resize_after_updates():
    table = SymbolTable()
    for i in range(100):
        table.insert_or_update(f"n{i}", Decimal(i))
        table.insert_or_update(f"n{i}", Decimal(i * 2))
    assert table.capacity == 256
    assert all(table.get(f"n{i}") == i * 2 for i in range(100))


def test_colliding_names_chain_most_recent_first():
    # "aa" and "bh" share bucket 55 of 64
    assert fnv1a_hash("aa") % 64 == fnv1a_hash("bh") % 64
    table = SymbolTable()
    table.insert_or_update("aa", Decimal(1))
    table.insert_or_update("bh", Decimal(2))
    assert table.names() == ["bh", "aa"]
    assert table.get("aa") == 1
    assert table.get("bh") == 2
    table.insert_or_update("aa", Decimal(3))
    assert table.names() == ["bh", "aa"]
    assert table.get("aa") == 3


def test_items_follow_bucket_order():
    table = SymbolTable()
    names = [f"k{i}" for i in range(20)]
    for i, name in enumerate(names):
        table.insert_or_update(name, Decimal(i))
    listed = table.names()
    assert sorted(listed) == sorted(names)
    buckets = [fnv1a_hash(n) % table.capacity for n in listed]
    assert buckets == sorted(buckets)


def test_clear_removes_everything_but_keeps_capacity():
    table = SymbolTable()
    for i in range(45):
        table.insert_or_update(f"v{i}", Decimal(i))
    buckets = table.buckets
    capacity = table.capacity
    table.clear()
    assert table.count == 0
    assert table.capacity == capacity
    assert table.buckets is buckets
    assert all(table.get(f"v{i}") is None for i in range(45))
    assert list(table.items()) == []


def test_table_usable_after_clear():
    table = SymbolTable()
    table.insert_or_update("a", Decimal(1))
    table.clear()
    table.insert_or_update("a", Decimal(2))
    assert table.get("a") == 2
    assert table.count == 1


def test_destroy_makes_table_unusable():
    table = SymbolTable()
    table.insert_or_update("a", Decimal(1))
    table.destroy()
    assert table.buckets is None
    with pytest.raises(CalculatorError):
        table.get("a")
    table.destroy()


def test_nan_values_can_be_stored():
    table = SymbolTable()
    table.insert_or_update("n", Decimal("NaN"))
    assert table.get("n").is_nan()
