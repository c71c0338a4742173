"""Tests for class declaration with @marshalable."""

from __future__ import annotations

import dataclasses
from typing import Optional

from tagmarshal import (
    ABSENT,
    Marshalable,
    is_bound,
    marshal_field,
    marshalable,
    metadata_for,
    register_driver,
)
from tagmarshal.drivers import JsonDriver


@marshalable
class Point:
    x: int = marshal_field(assoc="field_x")
    y: int = marshal_field(assoc="field_y")


@marshalable(namespace="test_decorators.shapes")
class Vertex:
    x: int = marshal_field(full="x")
    y: int = marshal_field(full="y")


@marshalable(namespace="test_decorators.shapes")
class Shape:
    name: str = marshal_field(full="name")
    origin: Optional[Vertex] = marshal_field(full="origin")
    anchor: object = marshal_field(full="anchor", type=Vertex)
    sides: int = 0


@marshalable
class Circle(Shape):
    radius: float = marshal_field(full="r", views={"with space": "radius"})


register_driver("test_decorators.shapes", "full", JsonDriver)


def test_class_becomes_dataclass_with_unbound_defaults() -> None:
    point = Point()

    assert dataclasses.is_dataclass(point)
    assert point.x is ABSENT
    assert not is_bound(point, "x")
    assert repr(point) == "Point(x=ABSENT, y=ABSENT)"


def test_declared_defaults_are_kept() -> None:
    shape = Shape(name="square")

    assert shape.sides == 0
    assert is_bound(shape, "sides")


def test_metadata_records_views_in_declaration_order() -> None:
    meta = metadata_for(Shape)

    assert meta.fields == ("name", "origin", "anchor", "sides")
    assert list(meta.view_map["full"].items()) == [
        ("name", "name"),
        ("origin", "origin"),
        ("anchor", "anchor"),
    ]


def test_nested_types_come_from_annotations_and_overrides() -> None:
    meta = metadata_for(Shape)

    assert meta.type_map["origin"] is Vertex
    assert meta.type_map["anchor"] is Vertex
    assert meta.type_map["sides"] is int


def test_subclass_registration_includes_inherited_fields() -> None:
    meta = metadata_for(Circle)

    assert meta.fields == ("name", "origin", "anchor", "sides", "radius")
    assert meta.view_map["full"]["radius"] == "r"
    assert meta.view_map["with space"] == {"radius": "radius"}
    assert meta.namespace is metadata_for(Shape).namespace


def test_convenience_methods_round_trip() -> None:
    circle = Circle(name="c", origin=Vertex(x=1, y=2), radius=2.5)

    blob = circle.marshal("full")
    restored = Circle.unmarshal(blob, "full")

    assert blob == {"name": "c", "origin": {"x": 1, "y": 2}, "r": 2.5}
    assert restored == Circle(name="c", origin=Vertex(x=1, y=2), radius=2.5)
    assert isinstance(circle, Marshalable)


def test_existing_dataclass_is_registered_without_change() -> None:
    @marshalable
    @dataclasses.dataclass
    class Pair:
        left: int = marshal_field(0, assoc="l")
        right: int = marshal_field(0, assoc="r")

    assert Pair().marshal("assoc") == [("r", 0), ("l", 0)]


def test_own_marshal_method_is_not_replaced() -> None:
    @marshalable
    class Custom:
        value: int = marshal_field(assoc="v")

        def marshal(self, view: str) -> str:
            return "custom"

    assert Custom(value=1).marshal("assoc") == "custom"
    assert Custom.unmarshal([("v", 3)], "assoc") == Custom(value=3)
