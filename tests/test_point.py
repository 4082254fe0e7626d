from datetime import datetime, timezone

import pytest

from influxline.errors import EncodingError
from influxline.point import FieldKind, FieldValue, Point
from influxline.precision import Precision


def test_field_value_rendering():
    assert FieldValue.of(5).encode() == "5i"
    assert FieldValue.of(5.0).encode() == "5"
    assert FieldValue.of(12.3).encode() == "12.3"
    assert FieldValue.of(True).encode() == "true"
    assert FieldValue.of(False).encode() == "false"
    assert FieldValue.of('a,"b').encode() == '"a,\\"b"'
    assert FieldValue.of("c:\\tmp").encode() == '"c:\\\\tmp"'


def test_bool_is_not_treated_as_integer():
    assert FieldValue.of(True).kind is FieldKind.BOOLEAN
    with pytest.raises(EncodingError):
        FieldValue.integer(True)


def test_floating_accepts_int_and_rejects_non_finite():
    assert FieldValue.floating(5).encode() == "5"
    with pytest.raises(EncodingError):
        FieldValue.floating(float("nan"))
    with pytest.raises(EncodingError):
        FieldValue.floating(float("inf"))


@pytest.mark.parametrize("value", [None, [1], {"a": 1}, b"bytes"])
def test_unsupported_field_types_rejected(value):
    point = Point("m")
    with pytest.raises(EncodingError):
        point.set_field("v", value)


def test_encode_with_tags_and_fields_in_insertion_order():
    point = Point("location").add_tag("user", "bob").add_tag("device", "iphone")
    point.set_field("z", 1).set_field("a", 2.5).set_field("ok", True)
    assert point.encode() == "location,user=bob,device=iphone z=1i,a=2.5,ok=true"


def test_encode_without_tags_has_single_space():
    point = Point("cpu").set_field("load", 0.5)
    assert point.encode() == "cpu load=0.5"


def test_overwriting_keeps_position():
    point = Point("m").add_tag("a", "1").add_tag("b", "2").set_field("x", 1).set_field("y", 2)
    point.add_tag("a", "3").set_field("x", "s")
    assert point.encode() == 'm,a=3,b=2 x="s",y=2i'


def test_escaping_of_names_and_tag_values():
    point = Point("my meas,x").add_tag("tag key", "a=b,c d").set_field("f=1", 1)
    assert point.encode() == "my\\ meas\\,x,tag\\ key=a\\=b\\,c\\ d f\\=1=1i"


def test_encode_is_deterministic():
    def build():
        return Point("m").add_tag("b", "2").add_tag("a", "1").set_field("y", 1.0).set_field("x", "v")

    assert build().encode() == build().encode()


def test_zero_fields_fails():
    with pytest.raises(EncodingError):
        Point("m").add_tag("a", "b").encode()


def test_empty_measurement_fails():
    with pytest.raises(EncodingError):
        Point("").set_field("v", 1).encode()


def test_set_timestamp_accepts_naive_aware_and_epoch():
    aware = datetime(2020, 1, 14, 12, 0, tzinfo=timezone.utc)
    assert Point("m").set_timestamp(aware).timestamp == aware
    assert Point("m").set_timestamp(datetime(2020, 1, 14, 12, 0)).timestamp == aware
    assert Point("m").set_timestamp(aware.timestamp()).timestamp == aware


def test_line_uses_explicit_timestamp():
    point = Point("m").set_field("v", 1).set_timestamp(datetime(2020, 1, 1, tzinfo=timezone.utc))
    assert point.line(Precision.SECONDS) == "m v=1i 1577836800"


def test_line_uses_clock_without_timestamp():
    point = Point("m").set_field("v", 1)
    assert point.line(Precision.MILLISECONDS, clock=lambda: (10, 250_000)) == "m v=1i 10250"
