"""Map location samples to points."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from influxline.client import InfluxClient
from influxline.point import FieldValue, Point
from influxline.result import WriteResult

LOCATION_MEASUREMENT = "location"


@dataclass(frozen=True)
class LocationSample:
    latitude: float
    longitude: float
    altitude: float
    time: datetime


def location_to_point(
    sample: LocationSample,
    user: str,
    device_name: Optional[str] = None,
    device_id: Optional[str] = None,
) -> Point:
    point = Point(LOCATION_MEASUREMENT)
    point.add_tag("user", user)
    if device_name:
        point.add_tag("device_name", device_name)
    if device_id:
        point.add_tag("device_id", device_id)
    point.set_field("latitude", FieldValue.floating(sample.latitude))
    point.set_field("longitude", FieldValue.floating(sample.longitude))
    point.set_field("altitude", FieldValue.floating(sample.altitude))
    point.set_timestamp(sample.time)
    return point


def upload_locations(
    client: InfluxClient,
    samples: Iterable[LocationSample],
    user: str,
    device_name: Optional[str] = None,
    device_id: Optional[str] = None,
) -> "Future[WriteResult]":
    """Queue one point per sample and flush them as a single batch."""

    points: List[Point] = [location_to_point(s, user, device_name, device_id) for s in samples]
    for point in points:
        client.prepare(point)
    return client.flush()
