"""Line protocol client package exports."""

from influxline.client import InfluxClient  # noqa: F401
from influxline.errors import ConfigError, EncodingError, ServerError, TransportError, WriteError  # noqa: F401
from influxline.point import FieldKind, FieldValue, Point  # noqa: F401
from influxline.precision import Precision  # noqa: F401
from influxline.result import WriteResult  # noqa: F401
from influxline.transport import HttpTransport, TransportResponse  # noqa: F401
