"""Tests for the built-in drivers."""

from __future__ import annotations

import pytest

from tagmarshal import (
    ABSENT,
    AssocDriver,
    DecodeError,
    Driver,
    EncodeError,
    JsonDriver,
    MsgpackDriver,
)


def test_base_driver_is_inert() -> None:
    driver = Driver()

    assert driver.write("tag", 1) is None
    assert driver.read("tag", [("tag", 1)]) is ABSENT


def test_assoc_driver_prepends_and_accumulates() -> None:
    driver = AssocDriver()

    first = driver.write("a", 1)
    second = driver.write("b", 2)

    assert first is second
    assert second == [("b", 2), ("a", 1)]


def test_assoc_driver_reads_pairs_and_lists() -> None:
    driver = AssocDriver()

    assert driver.read("a", [("a", 1), ("b", 2)]) == 1
    assert driver.read("b", [["a", 1], ["b", 2]]) == 2
    assert driver.read("c", [("a", 1)]) is ABSENT


@pytest.mark.parametrize("blob", [None, 5, "ab", b"ab", ABSENT])
def test_assoc_driver_read_of_non_list_is_absent(blob: object) -> None:
    assert AssocDriver().read("a", blob) is ABSENT


def test_assoc_driver_read_keeps_falsy_values() -> None:
    assert AssocDriver().read("a", [("a", 0)]) == 0
    assert AssocDriver().read("a", [("a", None)]) is None


def test_assoc_dump_and_load() -> None:
    blob = [("p", [("x", 1)]), ("raw", b"\x00\x01")]

    data = AssocDriver.dump(blob)

    assert AssocDriver.load(data) == [["p", [["x", 1]]], ["raw", b"\x00\x01"]]


@pytest.mark.parametrize("driver_cls", [JsonDriver, MsgpackDriver])
def test_mapping_drivers_accumulate_dict(driver_cls: type[Driver]) -> None:
    driver = driver_cls()

    driver.write("a", 1)
    blob = driver.write("b", {"nested": True})

    assert blob == {"a": 1, "b": {"nested": True}}
    assert driver.read("b", blob) == {"nested": True}
    assert driver.read("missing", blob) is ABSENT
    assert driver.read("a", [("a", 1)]) is ABSENT


def test_json_dump_is_compact_and_carries_bytes() -> None:
    data = JsonDriver.dump({"a": 1, "b": b"hi"})

    assert data == b'{"a":1,"b":{"__bytes__":"aGk="}}'
    assert JsonDriver.load(data) == {"a": 1, "b": b"hi"}


def test_json_load_keeps_objects_that_merely_contain_bytes_key() -> None:
    data = b'{"__bytes__":"aGk=","extra":1}'

    assert JsonDriver.load(data) == {"__bytes__": "aGk=", "extra": 1}


def test_msgpack_dump_and_load() -> None:
    blob = {"a": 1, "b": b"\xff", "c": {"d": [1, 2]}}

    assert MsgpackDriver.load(MsgpackDriver.dump(blob)) == blob


@pytest.mark.parametrize(
    "driver_cls, data",
    [
        (JsonDriver, b"{not json"),
        (JsonDriver, b"\xff\xfe"),
        (AssocDriver, b"[1,"),
        (MsgpackDriver, b"\xc1"),
    ],
)
def test_load_of_malformed_data_raises_decode_error(driver_cls: type, data: bytes) -> None:
    with pytest.raises(DecodeError):
        driver_cls.load(data)


@pytest.mark.parametrize("driver_cls", [JsonDriver, AssocDriver, MsgpackDriver])
def test_dump_of_unencodable_blob_raises_encode_error(driver_cls: type) -> None:
    with pytest.raises(EncodeError):
        driver_cls.dump({"a": object()})
